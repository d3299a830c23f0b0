"""
Content Extraction
==================

Picks the best available body for a feed item and derives the plain-text
snippet and description stored alongside it.

Feed items are heterogeneous: depending on the platform the full body may
live in ``content``, ``content:encoded``, a text snippet, ``summary``,
``description`` or a ``body`` field. Extraction walks a fixed priority order,
richest representation first, and never fails.
"""

import re
from typing import Any, Optional

from bs4 import BeautifulSoup


FALLBACK_BODY = "See link for full content."

# Richest representation first
CONTENT_FIELDS = (
    "content",
    "content-encoded",
    "snippet",
    "summary",
    "description",
    "body",
)

# Fields suitable for a short plain-text description
DESCRIPTION_FIELDS = ("snippet", "summary", "description")

# Elements whose text never belongs in a snippet
NON_CONTENT_ELEMENTS = ["script", "style", "noscript", "iframe", "form", "template"]

WHITESPACE_PATTERN = re.compile(r"\s+")


def _field_value(item: Any, field: str) -> Any:
    """Read ``field`` from a mapping or attribute object.

    ``content-encoded`` is also looked up as ``content_encoded`` and
    ``contentEncoded`` so raw feed dicts and ``FeedItem`` objects both work.
    """
    variants = (field, field.replace("-", "_"), _camel(field))
    for name in variants:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def _camel(field: str) -> str:
    head, *rest = field.split("-")
    return head + "".join(part.capitalize() for part in rest)


def _non_empty_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_content(item: Any) -> str:
    """Return the richest non-empty body of ``item``.

    Args:
        item: Feed item as a dict or attribute object

    Returns:
        First non-empty value among ``CONTENT_FIELDS``, or ``FALLBACK_BODY``
    """
    for field in CONTENT_FIELDS:
        value = _non_empty_text(_field_value(item, field))
        if value is not None:
            return value
    return FALLBACK_BODY


def html_to_text(html_content: Optional[str]) -> str:
    """Extract plain text from an HTML fragment.

    Scripts, styles and similar non-content elements are dropped and
    whitespace is collapsed. Plain text input passes through normalized.
    """
    if not html_content or not html_content.strip():
        return ""

    soup = BeautifulSoup(html_content, "html.parser")
    for element in soup(NON_CONTENT_ELEMENTS):
        element.decompose()

    text = soup.get_text(separator=" ", strip=True)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters."""
    if limit <= 0:
        return ""
    return text[:limit]


def extract_description(item: Any, limit: int = 500) -> Optional[str]:
    """Short plain-text description for the metadata record.

    Returns:
        The first non-empty of snippet/summary/description converted to text
        and truncated to ``limit`` characters, or None
    """
    for field in DESCRIPTION_FIELDS:
        value = _non_empty_text(_field_value(item, field))
        if value is None:
            continue
        text = html_to_text(value)
        if text:
            return truncate(text, limit)
    return None
