"""
Post Store
==========

File-backed persistence of posts: one markdown rendering and one JSON
metadata document per storage key. These pairs are the only durable
representation; there is no other index.
"""

import json
from pathlib import Path
from typing import Iterator, Optional

from .models import PostRecord
from ..ingestion.date_resolver import UNKNOWN_DATE
from ..utils.exceptions import StorageError, ErrorCode
from ..utils.logging import get_logger_for_component


def render_markdown(record: PostRecord, body: str) -> str:
    """Human-readable rendering of a post."""
    published = record.published[:10] if record.published else UNKNOWN_DATE
    return (
        f"# {record.title}\n\n"
        f"- **Published:** {published}\n"
        f"- **Link:** {record.link}\n\n"
        f"{body}\n"
    )


class PostStore:
    """Writes and lists the (markdown, metadata) pairs of one target."""

    def __init__(self, posts_dir: Path, metadata_dir: Path, target: Optional[str] = None):
        self.posts_dir = Path(posts_dir)
        self.metadata_dir = Path(metadata_dir)
        self.logger = get_logger_for_component("post_store", target=target)

    def ensure_directories(self) -> None:
        """Create the owning directories if absent."""
        try:
            self.posts_dir.mkdir(parents=True, exist_ok=True)
            self.metadata_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create store directories: {e}",
                path=str(self.posts_dir),
                error_code=ErrorCode.STORAGE_PERMISSION_DENIED,
            ) from e

    def post_path(self, key: str) -> Path:
        return self.posts_dir / f"{key}.md"

    def metadata_path(self, key: str) -> Path:
        return self.metadata_dir / f"{key}.json"

    def write(self, key: str, record: PostRecord, body: str) -> None:
        """Persist ``record`` and ``body`` under ``key``.

        The markdown file is written first and the metadata file last; the
        metadata file is what dedup hydration reads, so a post only counts as
        stored once both files exist. On failure the markdown file is removed
        so no key is left without its metadata.

        Raises:
            StorageError: If either file cannot be written
        """
        self.ensure_directories()

        md_path = self.post_path(key)
        meta_path = self.metadata_path(key)
        try:
            md_path.write_text(render_markdown(record, body), encoding="utf-8")
            meta_path.write_text(record.to_json(), encoding="utf-8")
        except OSError as e:
            md_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write post {key}: {e}",
                path=str(md_path),
            ) from e

        self.logger.debug(f"Stored {key}", extra={"link": record.link})

    def existing_keys(self) -> Iterator[str]:
        """Base names of stored markdown files."""
        if not self.posts_dir.is_dir():
            return iter(())
        return (p.stem for p in sorted(self.posts_dir.glob("*.md")))

    def existing_links(self) -> Iterator[str]:
        """Raw ``link`` values of stored metadata documents, unreadable ones skipped."""
        if not self.metadata_dir.is_dir():
            return
        for meta_path in sorted(self.metadata_dir.glob("*.json")):
            try:
                meta = json.loads(meta_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                self.logger.debug(f"Ignoring unreadable metadata {meta_path.name}: {e}")
                continue
            link = meta.get("link") if isinstance(meta, dict) else None
            if isinstance(link, str) and link.strip():
                yield link

    def count(self) -> int:
        """Number of stored metadata documents."""
        if not self.metadata_dir.is_dir():
            return 0
        return sum(1 for _ in self.metadata_dir.glob("*.json"))
