"""
Dedup Index
===========

In-memory record of which post URLs and storage keys already exist for one
target. Hydrated from the persisted metadata and markdown files at the start
of every sync; the files remain the only durable state.
"""

from pathlib import Path
from typing import Iterable, Optional, Set

from ..ingestion.url_normalizer import normalize_post_url
from ..utils.logging import get_logger_for_component
from .post_store import PostStore


class DedupIndex:
    """Seen normalized links plus allocated storage keys."""

    def __init__(
        self,
        links: Optional[Iterable[str]] = None,
        keys: Optional[Iterable[str]] = None,
    ):
        self._links: Set[str] = set(links or ())
        self._keys: Set[str] = set(keys or ())

    @classmethod
    def from_store(cls, store: PostStore) -> "DedupIndex":
        """Build an index from a target's store.

        Every readable metadata document contributes its normalized ``link``;
        every markdown file contributes its base name as an allocated key.
        Missing directories contribute nothing.
        """
        links = {normalize_post_url(link) for link in store.existing_links()}
        keys = set(store.existing_keys())

        get_logger_for_component("dedup_index").debug(
            f"Hydrated dedup index: {len(links)} links, {len(keys)} keys"
        )
        return cls(links=links, keys=keys)

    @classmethod
    def from_disk(cls, posts_dir: Path, metadata_dir: Path) -> "DedupIndex":
        return cls.from_store(PostStore(posts_dir, metadata_dir))

    def contains(self, normalized_url: str) -> bool:
        return normalized_url in self._links

    def add(self, normalized_url: str) -> None:
        self._links.add(normalized_url)

    def has_key(self, key: str) -> bool:
        return key in self._keys

    def add_key(self, key: str) -> None:
        self._keys.add(key)

    @property
    def link_count(self) -> int:
        return len(self._links)

    @property
    def key_count(self) -> int:
        return len(self._keys)

    def __contains__(self, normalized_url: str) -> bool:
        return self.contains(normalized_url)

    def __repr__(self) -> str:
        return f"DedupIndex(links={len(self._links)}, keys={len(self._keys)})"
