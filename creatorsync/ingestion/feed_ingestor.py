"""
Feed Ingestion
==============

Turns the items of a content owner's feeds into stored posts, skipping
anything already present in the target's store.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..config.settings import CreatorSyncSettings
from ..config.source_config import SourceConfig
from ..storage.dedup_index import DedupIndex
from ..storage.filename_allocator import FilenameAllocator
from ..storage.models import PostRecord
from ..storage.post_store import PostStore
from ..utils.exceptions import FeedError, is_retryable_error
from ..utils.logging import get_logger_for_component
from .content_extractor import extract_content, extract_description
from .date_resolver import date_token, resolve_date, to_iso
from .feed_manager import FeedItem, FeedManager, ParsedFeed
from .url_normalizer import normalize_post_url


@dataclass
class IngestionResult:
    """Counts for one ingestion pass over a target's feeds."""

    written: int = 0
    skipped: int = 0
    failed_feeds: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_feeds


class FeedIngestor:
    """Writes every unseen feed item of one content owner."""

    def __init__(
        self,
        settings: CreatorSyncSettings,
        config: SourceConfig,
        store: PostStore,
        index: DedupIndex,
        feed_manager: Optional[FeedManager] = None,
    ):
        self.settings = settings
        self.config = config
        self.store = store
        self.index = index
        self.allocator = FilenameAllocator(index)
        self.feed_manager = feed_manager or FeedManager(settings)
        self.source_kind = config.source_kind
        self.logger = get_logger_for_component("feed_ingestor", target=config.identifier)

    def ingest(self) -> IngestionResult:
        """Process every configured feed in order.

        A feed that cannot be fetched or parsed is logged and skipped; the
        remaining feeds are still processed.

        Raises:
            StorageError: If a post cannot be written
        """
        result = IngestionResult()

        for feed_url in self.config.feed_urls:
            try:
                parsed = self.feed_manager.fetch_feed(feed_url)
            except FeedError as e:
                log = self.logger.warning if is_retryable_error(e) else self.logger.error
                log(f"Skipping feed {feed_url}: {e}", extra=e.to_dict())
                result.failed_feeds.append(feed_url)
                continue

            written, skipped = self.ingest_feed(parsed)
            result.written += written
            result.skipped += skipped

        return result

    def ingest_feed(self, parsed: ParsedFeed) -> tuple:
        """Store the unseen items of one parsed feed.

        Returns:
            (written, skipped) counts
        """
        # the feed's own link, resolved against the feed URL, is the base for item links
        base = normalize_post_url(parsed.metadata.link or parsed.feed_url, parsed.feed_url)

        written = skipped = 0
        for item in parsed.items:
            raw_link = item.link or item.guid
            if not raw_link:
                continue

            link = normalize_post_url(raw_link, base)
            if self.index.contains(link):
                skipped += 1
                continue

            self._store_item(item, link, parsed.feed_url)
            written += 1

        self.logger.info(f"{parsed.feed_url}: {written} new, {skipped} already stored")
        return written, skipped

    def _store_item(self, item: FeedItem, link: str, feed_url: str) -> None:
        published = resolve_date(*item.date_candidates)
        updated = resolve_date(item.updated, item.updated_parsed)

        record = PostRecord(
            title=item.title,
            link=link,
            published=to_iso(published),
            updated=to_iso(updated),
            source=self.source_kind,
            feed_url=feed_url,
            description=extract_description(item, self.settings.storage.description_length),
            guid=item.guid or link,
        )

        key = self.allocator.allocate(date_token(published), record.title)
        self.store.write(key, record, extract_content(item))
        self.index.add(link)
