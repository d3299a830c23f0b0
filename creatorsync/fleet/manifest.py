"""
Creators Manifest
=================

Summary of every target in the index repository, regenerated from the
targets' ``creator.json`` files and stored metadata.
"""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from ..storage.post_store import PostStore
from ..utils.exceptions import StorageError
from ..utils.logging import get_logger_for_component


class ManifestEntry(BaseModel):
    """One target in ``creators/manifest.json``."""
    slug: str
    display_name: str = Field(..., alias="displayName")
    blog_url: Optional[str] = Field(default=None, alias="blogUrl")
    follow_url: Optional[str] = Field(default=None, alias="followUrl")
    repo: Optional[str] = None
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    post_count: int = Field(default=0, ge=0, alias="postCount")

    model_config = {
        "populate_by_name": True,
    }


def build_manifest(
    targets_dir: Path,
    config_filename: str = "creator.json",
    metadata_dir: str = "metadata",
    posts_dir: str = "posts",
) -> List[ManifestEntry]:
    """Collect a manifest entry for every target with a readable configuration.

    Entries are sorted by slug. Slug and display name fall back to the
    directory name; ``postCount`` is the number of stored metadata documents.
    """
    logger = get_logger_for_component("manifest")
    targets_dir = Path(targets_dir)
    if not targets_dir.is_dir():
        return []

    entries = []
    for entry in targets_dir.iterdir():
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        try:
            creator = json.loads((entry / config_filename).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            continue
        if not isinstance(creator, dict):
            logger.debug(f"Skipping {entry.name}: {config_filename} is not an object")
            continue

        entries.append(ManifestEntry(
            slug=creator.get("slug") or entry.name,
            display_name=creator.get("displayName") or entry.name,
            blog_url=creator.get("blogUrl"),
            follow_url=creator.get("followUrl"),
            post_count=PostStore(entry / posts_dir, entry / metadata_dir).count(),
        ))

    return sorted(entries, key=lambda e: e.slug)


def write_manifest(
    targets_dir: Path,
    path: Path,
    config_filename: str = "creator.json",
    metadata_dir: str = "metadata",
    posts_dir: str = "posts",
) -> List[ManifestEntry]:
    """Regenerate the manifest file at ``path``.

    Raises:
        StorageError: If the file cannot be written
    """
    entries = build_manifest(targets_dir, config_filename, metadata_dir, posts_dir)
    data = [e.model_dump(by_alias=True) for e in entries]

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot write manifest: {e}", path=str(path)) from e

    get_logger_for_component("manifest").info(f"Wrote {len(entries)} creator(s) to {path}")
    return entries
