"""
Storage Key Allocation
======================

Derives collision-safe storage keys (``{date}_{slug}[-n]``) for accepted
posts.
"""

import re

from .dedup_index import DedupIndex


SLUG_MAX_LENGTH = 80
DEFAULT_SLUG = "post"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-+")


def slugify(title: str, default: str = DEFAULT_SLUG) -> str:
    """Lowercase, hyphenated, alphanumeric slug of at most 80 characters.

    >>> slugify("Hello, World!")
    'hello-world'
    >>> slugify("???")
    'post'
    """
    slug = (title or "").strip().lower()
    slug = _WHITESPACE.sub("-", slug)
    slug = _DISALLOWED.sub("", slug)
    slug = _DASH_RUNS.sub("-", slug)
    slug = slug.strip("-")
    return slug[:SLUG_MAX_LENGTH] or default


class FilenameAllocator:
    """Allocates unique storage keys against a live ``DedupIndex``.

    The index holds keys already on disk and keys allocated earlier in the
    same run; every allocation registers its key before returning.
    """

    def __init__(self, index: DedupIndex):
        self.index = index

    def allocate(self, date_token: str, title: str) -> str:
        """Allocate the key for a post with ``title`` dated ``date_token``."""
        return self.allocate_slug(date_token, slugify(title))

    def allocate_slug(self, date_token: str, slug: str) -> str:
        """Allocate ``{date_token}_{slug}``, suffixing ``-1``, ``-2``... on collision."""
        base = f"{date_token}_{slug}"
        key = base
        n = 1
        while self.index.has_key(key):
            key = f"{base}-{n}"
            n += 1
        self.index.add_key(key)
        return key
