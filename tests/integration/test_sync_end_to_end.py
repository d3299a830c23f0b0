"""
Integration Tests for Per-Target Sync
=====================================

Runs ``sync_target`` against real temporary target directories with the
HTTP layer mocked.
"""

import json
from unittest.mock import patch

import pytest

from creatorsync.ingestion.sync import SyncResult, sync_target
from creatorsync.utils.exceptions import ConfigurationError, ErrorCode


pytestmark = pytest.mark.integration


def snapshot(root):
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file() and p.parent.name in ("posts", "metadata")
    }


class TestSyncTarget:

    @patch('requests.Session.get')
    def test_blog_scenario(self, mock_get, settings, make_target, make_response, sample_rss):
        mock_get.return_value = make_response(sample_rss)
        root = make_target("blog", blogUrl="https://blog.example.com")

        result = sync_target(root, settings)

        assert result == SyncResult(feed_written=1, archive_written=0)
        assert result.summary() == "Synced 1 from RSS; 0 from archive."

        markdown = (root / "posts" / "2024-03-05_first.md").read_text()
        assert markdown.startswith("# First\n\n- **Published:** 2024-03-05\n")
        assert "Hello <strong>world</strong>" in markdown

        meta = json.loads((root / "metadata" / "2024-03-05_first.json").read_text())
        assert meta["published"] == "2024-03-05T00:00:00.000Z"
        assert meta["source"] == "blog"
        assert meta["description"] == "Hello world"
        assert mock_get.call_count == 1

    @patch('requests.Session.get')
    def test_idempotent(self, mock_get, settings, make_target, make_response, sample_rss):
        mock_get.return_value = make_response(sample_rss)
        root = make_target("blog", blogUrl="https://blog.example.com")

        sync_target(root, settings)
        first = snapshot(root)
        second_result = sync_target(root, settings)

        assert second_result.total == 0
        assert snapshot(root) == first

    @patch('requests.Session.get')
    def test_unknown_date(self, mock_get, settings, make_target, make_response):
        feed = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>T</title><link>https://blog.example.com</link>
<item><title>Undated</title><link>https://blog.example.com/p/undated</link>
<pubDate>not-a-date</pubDate><description>x</description></item>
</channel></rss>"""
        mock_get.return_value = make_response(feed)
        root = make_target("blog", blogUrl="https://blog.example.com")

        sync_target(root, settings)

        meta = json.loads((root / "metadata" / "unknown_undated.json").read_text())
        assert meta["published"] is None
        assert "- **Published:** unknown" in (root / "posts" / "unknown_undated.md").read_text()

    @patch('requests.Session.get')
    def test_substack_feed_and_archive(self, mock_get, settings, make_target, make_response,
                                       substack_rss, substack_archive_html):
        def fake_get(url, **kwargs):
            if url.endswith("/archive"):
                return make_response(substack_archive_html, headers={"content-type": "text/html"})
            return make_response(substack_rss)

        mock_get.side_effect = fake_get
        root = make_target(
            "alice",
            blogUrl="https://alice.substack.com",
            feedUrls=["https://alice.substack.com/feed"],
        )

        result = sync_target(root, settings)

        assert result == SyncResult(feed_written=1, archive_written=2)
        keys = sorted(p.stem for p in (root / "posts").glob("*.md"))
        assert keys == ["2024-07-01_newest-post", "unknown_older-post", "unknown_oldest-post"]

        # the feed version of the shared post wins; no stub duplicates it
        links = [json.loads(p.read_text())["link"] for p in (root / "metadata").glob("*.json")]
        assert links.count("https://alice.substack.com/p/newest-post") == 1
        newest = json.loads((root / "metadata" / "2024-07-01_newest-post.json").read_text())
        assert "supplement" not in newest
        assert newest["source"] == "substack"

        second = sync_target(root, settings)
        assert second.total == 0

    @patch('requests.Session.get')
    def test_existing_store_respected(self, mock_get, settings, make_target, make_response,
                                      write_metadata, sample_rss):
        mock_get.return_value = make_response(sample_rss)
        root = make_target("blog", blogUrl="https://blog.example.com")
        write_metadata(root, "old-key", "https://blog.example.com/p/first/")

        result = sync_target(root, settings)

        assert result.feed_written == 0

    @patch('requests.Session.get')
    def test_feed_failure_is_not_fatal(self, mock_get, settings, make_target, make_response):
        mock_get.return_value = make_response("", status_code=500)
        root = make_target("blog", blogUrl="https://blog.example.com")

        result = sync_target(root, settings)

        assert result.total == 0
        assert (root / "posts").is_dir()
        assert (root / "metadata").is_dir()

    def test_missing_config(self, settings, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            sync_target(tmp_path, settings)
        assert exc_info.value.error_code == ErrorCode.CONFIG_MISSING

    def test_no_feed_urls(self, settings, make_target):
        root = make_target("blog", feedUrls=[])
        with pytest.raises(ConfigurationError) as exc_info:
            sync_target(root, settings)
        assert exc_info.value.error_code == ErrorCode.CONFIG_NO_FEEDS
