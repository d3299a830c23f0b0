"""
Per-Target Sync
===============

Entry point that brings one target's store up to date: feed ingestion
followed by the archive supplement.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.settings import CreatorSyncSettings
from ..config.source_config import load_source_config
from ..storage.dedup_index import DedupIndex
from ..storage.post_store import PostStore
from ..utils.exceptions import ConfigurationError, ErrorCode
from ..utils.logging import get_logger_for_component, PerformanceLogger
from .archive_supplementer import ArchiveSupplementer
from .feed_ingestor import FeedIngestor
from .feed_manager import FeedManager


@dataclass
class SyncResult:
    """Posts written by one sync run."""

    feed_written: int = 0
    archive_written: int = 0

    @property
    def total(self) -> int:
        return self.feed_written + self.archive_written

    def summary(self) -> str:
        return f"Synced {self.feed_written} from RSS; {self.archive_written} from archive."


def sync_target(
    root: Path,
    settings: CreatorSyncSettings,
    feed_manager: Optional[FeedManager] = None,
    archive_session=None,
) -> SyncResult:
    """Sync the target rooted at ``root``.

    Args:
        root: Target directory holding ``creator.json``
        settings: Application settings
        feed_manager: Optional pre-built feed manager
        archive_session: Optional HTTP session for the archive fetch

    Returns:
        Counts of posts written from feeds and from the archive

    Raises:
        ConfigurationError: If ``creator.json`` is missing or invalid, or
            lists no feed URLs
        StorageError: If the store cannot be written
    """
    root = Path(root)
    config = load_source_config(root / settings.fleet.config_filename)
    logger = get_logger_for_component("sync", target=config.identifier)

    if not config.feed_urls:
        raise ConfigurationError(
            f"No feedUrls in {settings.fleet.config_filename}",
            config_key="feedUrls",
            error_code=ErrorCode.CONFIG_NO_FEEDS,
        )

    store = PostStore(
        root / settings.storage.posts_dir,
        root / settings.storage.metadata_dir,
        target=config.identifier,
    )
    store.ensure_directories()
    index = DedupIndex.from_store(store)

    result = SyncResult()
    with PerformanceLogger(logger, f"sync of {config.identifier}"):
        ingestor = FeedIngestor(settings, config, store, index, feed_manager=feed_manager)
        try:
            ingestion = ingestor.ingest()
        finally:
            if feed_manager is None:
                ingestor.feed_manager.close()
        result.feed_written = ingestion.written

        supplementer = ArchiveSupplementer(settings, config, store, index, session=archive_session)
        try:
            result.archive_written = supplementer.supplement()
        finally:
            supplementer.close()

    logger.info(result.summary())
    return result
