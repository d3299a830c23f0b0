"""
Unit Tests for the Post Store
=============================

Tests for storage key allocation, dedup hydration and the persisted
markdown/metadata pairs.
"""

import json
from unittest.mock import patch

import pytest

from creatorsync.config.source_config import SourceKind
from creatorsync.storage.dedup_index import DedupIndex
from creatorsync.storage.filename_allocator import FilenameAllocator, slugify
from creatorsync.storage.models import PostRecord
from creatorsync.storage.post_store import PostStore, render_markdown
from creatorsync.utils.exceptions import StorageError


class TestSlugify:
    @pytest.mark.parametrize("title,expected", [
        ("Hello World", "hello-world"),
        ("  Hello,   World!  ", "hello-world"),
        ("C++ & Rust: a -- comparison", "c-rust-a-comparison"),
        ("Ünïcödé", "ncd"),
        ("???", "post"),
        ("", "post"),
        ("-leading and trailing-", "leading-and-trailing"),
    ])
    def test_slugify(self, title, expected):
        assert slugify(title) == expected

    def test_truncated_to_80(self):
        assert len(slugify("word " * 40)) == 80


class TestFilenameAllocator:
    def test_collision_suffixes(self):
        allocator = FilenameAllocator(DedupIndex())
        assert allocator.allocate("2024-01-01", "Hello") == "2024-01-01_hello"
        assert allocator.allocate("2024-01-01", "Hello") == "2024-01-01_hello-1"
        assert allocator.allocate("2024-01-01", "hello!") == "2024-01-01_hello-2"

    def test_existing_keys_respected(self):
        index = DedupIndex(keys=["2024-01-01_hello", "2024-01-01_hello-1"])
        allocator = FilenameAllocator(index)
        assert allocator.allocate("2024-01-01", "Hello") == "2024-01-01_hello-2"
        assert index.has_key("2024-01-01_hello-2")

    def test_smallest_unused_suffix(self):
        index = DedupIndex(keys=["unknown_post", "unknown_post-2"])
        assert FilenameAllocator(index).allocate_slug("unknown", "post") == "unknown_post-1"


class TestDedupIndex:
    def test_from_disk(self, tmp_path, write_metadata):
        write_metadata(tmp_path, "2024-01-01_a", "https://a.example/p/a/")
        write_metadata(tmp_path, "2024-01-02_b", "https://a.example/p/b#frag")
        (tmp_path / "metadata" / "broken.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "metadata" / "nolink.json").write_text('{"title": "x"}', encoding="utf-8")
        (tmp_path / "posts" / "orphan.md").write_text("# Orphan\n", encoding="utf-8")

        index = DedupIndex.from_disk(tmp_path / "posts", tmp_path / "metadata")

        assert index.contains("https://a.example/p/a")
        assert "https://a.example/p/b" in index
        assert index.link_count == 2
        assert index.has_key("2024-01-01_a")
        assert index.has_key("orphan")
        assert not index.has_key("broken")

    def test_missing_directories(self, tmp_path):
        index = DedupIndex.from_disk(tmp_path / "posts", tmp_path / "metadata")
        assert index.link_count == 0
        assert index.key_count == 0

    def test_add(self):
        index = DedupIndex()
        assert not index.contains("https://a.example/x")
        index.add("https://a.example/x")
        index.add_key("k")
        assert index.contains("https://a.example/x")
        assert index.has_key("k")


class TestPostRecord:
    def test_defaults_and_json(self):
        record = PostRecord(title="  ", link="https://a.example/p/x", feed_url="https://a.example/feed")
        data = json.loads(record.to_json())

        assert data == {
            "title": "Untitled",
            "link": "https://a.example/p/x",
            "published": None,
            "source": "blog",
            "feedUrl": "https://a.example/feed",
            "guid": "https://a.example/p/x",
        }

    def test_optional_fields_emitted_when_set(self):
        record = PostRecord(
            title="T",
            link="https://a.example/p/x",
            published="2024-03-05T00:00:00.000Z",
            updated="2024-03-06T00:00:00.000Z",
            source=SourceKind.SUBSTACK,
            feedUrl="https://a.example/feed",
            description="desc",
            guid="guid-1",
            supplement=True,
        )
        data = record.to_json_dict()
        assert data["updated"] == "2024-03-06T00:00:00.000Z"
        assert data["description"] == "desc"
        assert data["guid"] == "guid-1"
        assert data["source"] == "substack"
        assert data["supplement"] is True

    def test_link_required(self):
        with pytest.raises(ValueError):
            PostRecord(title="T", link="")


class TestPostStore:
    def test_write_pair(self, tmp_path):
        store = PostStore(tmp_path / "posts", tmp_path / "metadata")
        record = PostRecord(
            title="First",
            link="https://a.example/p/first",
            published="2024-03-05T00:00:00.000Z",
            feed_url="https://a.example/feed",
        )

        store.write("2024-03-05_first", record, "<p>Body</p>")

        markdown = (tmp_path / "posts" / "2024-03-05_first.md").read_text(encoding="utf-8")
        assert markdown == (
            "# First\n\n"
            "- **Published:** 2024-03-05\n"
            "- **Link:** https://a.example/p/first\n\n"
            "<p>Body</p>\n"
        )
        meta_text = (tmp_path / "metadata" / "2024-03-05_first.json").read_text(encoding="utf-8")
        assert meta_text.startswith('{\n  "title": "First"')
        assert json.loads(meta_text)["published"] == "2024-03-05T00:00:00.000Z"
        assert list(store.existing_keys()) == ["2024-03-05_first"]
        assert list(store.existing_links()) == ["https://a.example/p/first"]
        assert store.count() == 1

    def test_unknown_date_rendering(self):
        record = PostRecord(link="https://a.example/p/x")
        assert "- **Published:** unknown\n" in render_markdown(record, "body")

    def test_empty_store(self, tmp_path):
        store = PostStore(tmp_path / "posts", tmp_path / "metadata")
        assert list(store.existing_keys()) == []
        assert list(store.existing_links()) == []
        assert store.count() == 0

    def test_write_failure_raises_storage_error(self, tmp_path):
        store = PostStore(tmp_path / "posts", tmp_path / "metadata")
        record = PostRecord(link="https://a.example/p/x")

        with patch("pathlib.Path.write_text", side_effect=OSError("disk full")):
            with pytest.raises(StorageError) as exc_info:
                store.write("unknown_x", record, "body")

        assert "disk full" in str(exc_info.value)
        assert not (tmp_path / "metadata" / "unknown_x.json").exists()

    def test_metadata_failure_removes_markdown(self, tmp_path):
        store = PostStore(tmp_path / "posts", tmp_path / "metadata")
        (tmp_path / "metadata" / "k.json").mkdir(parents=True)

        with pytest.raises(StorageError):
            store.write("k", PostRecord(link="https://a.example/p/k"), "body")

        assert not (tmp_path / "posts" / "k.md").exists()
        assert list(store.existing_keys()) == []

    def test_failed_write_leaves_key_free(self, tmp_path):
        store = PostStore(tmp_path / "posts", tmp_path / "metadata")
        (tmp_path / "metadata" / "k.json").mkdir(parents=True)
        with pytest.raises(StorageError):
            store.write("k", PostRecord(link="https://a.example/p/k"), "body")

        index = DedupIndex.from_store(store)
        assert not index.has_key("k")
        assert not index.contains("https://a.example/p/k")
