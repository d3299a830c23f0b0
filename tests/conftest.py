"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for CreatorSync tests.

Every test works on temporary directories; HTTP is mocked by patching
``requests.Session.get`` and feeds are parsed from real XML strings.
"""

import json
import logging
import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["CREATORSYNC_FLEET__DELAY_SECONDS"] = "0"
os.environ["CREATORSYNC_HTTP__MAX_RETRIES"] = "0"


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def settings(tmp_path):
    """Settings rooted at a temporary index repository."""
    from creatorsync.config.settings import (
        CreatorSyncSettings,
        FleetSettings,
        HttpSettings,
        PathSettings,
    )

    return CreatorSyncSettings(
        paths=PathSettings(root_dir=tmp_path),
        fleet=FleetSettings(delay_seconds=0, retry_rounds=2),
        http=HttpSettings(max_retries=0, request_timeout=5),
    )


# ============================================================================
# Target Fixtures
# ============================================================================


@pytest.fixture
def make_target(tmp_path):
    """Factory creating a target directory with ``creator.json``.

    Usage:
        def test_x(make_target):
            root = make_target("alice", feedUrls=["https://a.example/feed"])
    """

    def _make(name="creator", with_entry_point=False, parent=None, **creator):
        parent = Path(parent) if parent else tmp_path / "subrepos"
        root = parent / name
        root.mkdir(parents=True, exist_ok=True)

        data = {
            "displayName": name.title(),
            "slug": name,
            "blogUrl": "https://blog.example.com",
            "feedUrls": ["https://blog.example.com/feed"],
        }
        data.update(creator)
        (root / "creator.json").write_text(json.dumps(data), encoding="utf-8")

        if with_entry_point:
            scripts = root / "scripts"
            scripts.mkdir(exist_ok=True)
            (scripts / "sync_posts.py").write_text(
                "from creatorsync.cli import sync\n\nsync()\n", encoding="utf-8"
            )
        return root

    return _make


@pytest.fixture
def write_metadata():
    """Write a metadata document (and matching markdown) into a target."""

    def _write(root, key, link, **fields):
        root = Path(root)
        (root / "metadata").mkdir(parents=True, exist_ok=True)
        (root / "posts").mkdir(parents=True, exist_ok=True)
        meta = {"title": fields.pop("title", "Existing"), "link": link}
        meta.update(fields)
        (root / "metadata" / f"{key}.json").write_text(json.dumps(meta), encoding="utf-8")
        (root / "posts" / f"{key}.md").write_text("# Existing\n", encoding="utf-8")

    return _write


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def make_response():
    """Build a fake ``requests.Response``."""

    def _make(content="", status_code=200, headers=None):
        response = Mock()
        body = content.encode("utf-8") if isinstance(content, str) else content
        response.content = body
        response.text = body.decode("utf-8")
        response.status_code = status_code
        response.headers = headers or {"content-type": "application/rss+xml"}
        if status_code >= 400:
            error = requests.HTTPError(f"{status_code} Error", response=response)
            response.raise_for_status.side_effect = error
        else:
            response.raise_for_status.return_value = None
        return response

    return _make


# ============================================================================
# Sample Feeds
# ============================================================================


@pytest.fixture
def sample_rss():
    """RSS 2.0 feed with one dated post."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Example Blog</title>
        <link>https://blog.example.com</link>
        <description>Posts from an example blog</description>
        <item>
            <title>First</title>
            <link>https://blog.example.com/p/first</link>
            <description>&lt;p&gt;Hello &lt;strong&gt;world&lt;/strong&gt;&lt;/p&gt;</description>
            <pubDate>Tue, 05 Mar 2024 00:00:00 GMT</pubDate>
            <guid>https://blog.example.com/p/first</guid>
        </item>
    </channel>
</rss>"""


@pytest.fixture
def substack_rss():
    """Substack-style feed whose posts also appear on the archive page."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
    <channel>
        <title>Alice Writes</title>
        <link>https://alice.substack.com</link>
        <description>Alice's newsletter</description>
        <item>
            <title>Newest Post</title>
            <link>https://alice.substack.com/p/newest-post</link>
            <description>Short summary</description>
            <content:encoded>&lt;p&gt;The full newest post.&lt;/p&gt;</content:encoded>
            <pubDate>Mon, 01 Jul 2024 09:30:00 GMT</pubDate>
        </item>
    </channel>
</rss>"""


@pytest.fixture
def substack_archive_html():
    """Archive page listing one post from the feed and two older ones."""
    return """<!DOCTYPE html>
<html>
<head><title>Archive - Alice Writes</title></head>
<body>
    <a href="https://alice.substack.com/p/newest-post">Newest Post</a>
    <a href="/p/older-post?utm_source=archive">Older Post</a>
    <a href="https://alice.substack.com/p/older-post/comments">12 comments</a>
    <a href="https://alice.substack.com/about">About</a>
    <script>window._preloads = {"posts": [{"canonical_url": "https://alice.substack.com/p/oldest-post"}]}</script>
</body>
</html>"""


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by CLI invocations."""
    yield
    logging.getLogger("creatorsync").handlers.clear()
