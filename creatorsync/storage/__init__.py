"""
CreatorSync Storage Layer
=========================

File-backed post store for a single target.

This module provides:
- Post records persisted as markdown plus JSON metadata pairs
- Dedup index hydrated from the persisted pairs
- Collision-safe storage key allocation
"""

from .dedup_index import DedupIndex
from .filename_allocator import FilenameAllocator, slugify
from .models import PostRecord
from .post_store import PostStore

__all__ = [
    "DedupIndex",
    "FilenameAllocator",
    "PostRecord",
    "PostStore",
    "slugify",
]
