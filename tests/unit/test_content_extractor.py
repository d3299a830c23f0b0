"""
Unit Tests for Content Extraction
=================================
"""

from types import SimpleNamespace

from creatorsync.ingestion.content_extractor import (
    FALLBACK_BODY,
    extract_content,
    extract_description,
    html_to_text,
    truncate,
)
from creatorsync.ingestion.feed_manager import FeedItem


class TestExtractContent:
    """Body selection priority."""

    def test_content_wins_over_everything(self):
        item = {"content": "<p>full</p>", "content-encoded": "enc", "summary": "sum"}
        assert extract_content(item) == "<p>full</p>"

    def test_priority_order(self):
        assert extract_content({"content_encoded": "enc", "snippet": "snip"}) == "enc"
        assert extract_content({"contentEncoded": "enc", "snippet": "snip"}) == "enc"
        assert extract_content({"snippet": "snip", "summary": "sum"}) == "snip"
        assert extract_content({"summary": "sum", "description": "desc"}) == "sum"
        assert extract_content({"description": "desc", "body": "b"}) == "desc"
        assert extract_content({"body": "b"}) == "b"

    def test_blank_fields_are_skipped(self):
        assert extract_content({"content": "   ", "summary": "sum"}) == "sum"

    def test_fallback_body(self):
        assert extract_content({}) == FALLBACK_BODY
        assert extract_content({"content": None, "title": "t"}) == FALLBACK_BODY

    def test_attribute_objects(self):
        item = FeedItem(title="t", content_encoded="<p>encoded</p>", summary="s")
        assert extract_content(item) == "<p>encoded</p>"
        assert extract_content(SimpleNamespace(body="plain body")) == "plain body"


class TestHtmlToText:
    def test_strips_tags_and_scripts(self):
        html = "<p>Hello <b>world</b></p><script>alert(1)</script><style>p{}</style>"
        assert html_to_text(html) == "Hello world"

    def test_collapses_whitespace(self):
        assert html_to_text("<div>a\n\n   b</div>\t<p>c</p>") == "a b c"

    def test_empty(self):
        assert html_to_text(None) == ""
        assert html_to_text("   ") == ""


class TestDescription:
    def test_uses_snippet_first(self):
        item = {"snippet": "Snippet text", "summary": "<p>Summary</p>"}
        assert extract_description(item) == "Snippet text"

    def test_html_converted_and_truncated(self):
        item = {"summary": "<p>" + "x" * 600 + "</p>"}
        description = extract_description(item, limit=500)
        assert description == "x" * 500

    def test_none_when_absent(self):
        assert extract_description({"content": "<p>only content</p>"}) is None

    def test_truncate(self):
        assert truncate("abcdef", 3) == "abc"
        assert truncate("abc", 0) == ""
