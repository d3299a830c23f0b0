"""
Archive Supplement
==================

Feeds only carry the most recent posts. For hosts with a public archive page,
this module scrapes post URLs from that page and stores a placeholder record
for each post the feed never delivered.

Link extraction is pluggable per host type through ``ArchiveLinkStrategy``;
only Substack is registered.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup

from ..config.settings import CreatorSyncSettings
from ..config.source_config import SourceConfig, SourceKind, SupplementStrategy
from ..storage.dedup_index import DedupIndex
from ..storage.filename_allocator import FilenameAllocator, slugify
from ..storage.models import PostRecord, UNTITLED
from ..storage.post_store import PostStore
from ..utils.exceptions import ArchiveFetchError
from ..utils.logging import get_logger_for_component
from .content_extractor import FALLBACK_BODY
from .date_resolver import UNKNOWN_DATE
from .feed_manager import build_http_session
from .url_normalizer import normalize_post_url


def archive_url_for(primary_url: str) -> str:
    """``https://x.substack.com/`` -> ``https://x.substack.com/archive``"""
    return f"{primary_url.strip().rstrip('/')}/archive"


class ArchiveLinkStrategy(ABC):
    """Extracts candidate post URLs from an archive page."""

    @abstractmethod
    def extract_links(self, html: str, page_url: str) -> List[str]:
        """Return absolute post URLs in document order, without duplicates."""

    @abstractmethod
    def slug_for(self, url: str) -> str:
        """Storage slug for a post URL."""


class SubstackArchiveStrategy(ArchiveLinkStrategy):
    """Substack archive pages link posts as ``/p/{slug}``."""

    POST_PATH = re.compile(r"^/p/([^/]+)/?$")
    # raw-document pass: catches posts referenced only from embedded JSON
    EMBEDDED_POST_PATH = re.compile(r"/p/([A-Za-z0-9][A-Za-z0-9_-]*)")
    NON_POST_SLUGS = frozenset({"comments"})

    def extract_links(self, html: str, page_url: str) -> List[str]:
        seen: Dict[str, None] = {}

        soup = BeautifulSoup(html or "", "html.parser")
        for anchor in soup.find_all(href=True):
            href = anchor["href"]
            if "/p/" not in href:
                continue
            try:
                parts = urlsplit(urljoin(page_url, href))
            except ValueError:
                continue
            match = self.POST_PATH.match(parts.path)
            if not match or match.group(1) in self.NON_POST_SLUGS:
                continue
            url = urlunsplit((parts.scheme, parts.netloc, f"/p/{match.group(1)}", "", ""))
            seen.setdefault(normalize_post_url(url), None)

        origin = self._origin(page_url)
        for match in self.EMBEDDED_POST_PATH.finditer(html or ""):
            slug = match.group(1)
            if slug in self.NON_POST_SLUGS:
                continue
            seen.setdefault(normalize_post_url(f"{origin}/p/{slug}"), None)

        return list(seen)

    def slug_for(self, url: str) -> str:
        match = re.search(r"/p/([^/]+)", urlsplit(url).path)
        return slugify(match.group(1) if match else url)

    @staticmethod
    def _origin(page_url: str) -> str:
        parts = urlsplit(page_url)
        return f"{parts.scheme}://{parts.netloc}"


ARCHIVE_STRATEGIES: Dict[SourceKind, ArchiveLinkStrategy] = {
    SourceKind.SUBSTACK: SubstackArchiveStrategy(),
}


def get_archive_strategy(kind: SourceKind) -> Optional[ArchiveLinkStrategy]:
    return ARCHIVE_STRATEGIES.get(kind)


class ArchiveSupplementer:
    """Stores placeholder records for archive posts missing from the feed."""

    def __init__(
        self,
        settings: CreatorSyncSettings,
        config: SourceConfig,
        store: PostStore,
        index: DedupIndex,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.config = config
        self.store = store
        self.index = index
        self.allocator = FilenameAllocator(index)
        self._session = session
        self._owns_session = session is None
        self.logger = get_logger_for_component("archive_supplementer", target=config.identifier)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = build_http_session(self.settings.http, self.settings.http.browser_user_agent)
        return self._session

    def close(self) -> None:
        """Close the session if this instance built it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def applies(self) -> bool:
        return (
            self.config.supplement_strategy == SupplementStrategy.ARCHIVE
            and bool(self.config.blog_url)
        )

    def supplement(self) -> int:
        """Scrape the archive and store unseen posts.

        Returns:
            Number of placeholder records written; 0 when the strategy does
            not apply, no extractor exists for the host, or the page cannot
            be fetched

        Raises:
            StorageError: If a record cannot be written
        """
        if not self.applies():
            return 0

        strategy = get_archive_strategy(self.config.source_kind)
        if strategy is None:
            self.logger.warning(
                f"No archive extractor for {self.config.source_kind.value} sources; skipping archive"
            )
            return 0

        archive_url = archive_url_for(self.config.blog_url)
        try:
            html = self.fetch_archive(archive_url)
        except ArchiveFetchError as e:
            self.logger.warning(f"Archive fetch failed: {e}", extra=e.to_dict())
            return 0

        candidates = strategy.extract_links(html, archive_url)
        self.logger.debug(f"Archive lists {len(candidates)} post links")

        written = 0
        for url in candidates:
            link = normalize_post_url(url, self.config.blog_url)
            if self.index.contains(link):
                continue
            self._store_stub(link, strategy.slug_for(link))
            written += 1

        self.logger.info(f"Archive supplement added {written} posts")
        return written

    def fetch_archive(self, archive_url: str) -> str:
        """GET the archive page.

        Raises:
            ArchiveFetchError: On network failure or an error status
        """
        try:
            response = self.session.get(archive_url, timeout=self.settings.http.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ArchiveFetchError(
                f"Failed to fetch archive {archive_url}: {e}",
                archive_url=archive_url,
            ) from e
        return response.text

    def _store_stub(self, link: str, slug: str) -> None:
        feed_urls = self.config.feed_urls
        record = PostRecord(
            title=UNTITLED,
            link=link,
            published=None,
            source=SourceKind.SUBSTACK,
            feed_url=feed_urls[0] if feed_urls else "",
            guid=link,
            supplement=True,
        )
        key = self.allocator.allocate_slug(UNKNOWN_DATE, slug)
        self.store.write(key, record, FALLBACK_BODY)
        self.index.add(link)
