"""
RSS Feed Manager
================

Fetches and parses RSS/Atom feeds with feedparser over a retrying
``requests`` session.

This module provides:
- Support for RSS 2.0, RSS 1.0 and Atom feeds
- Automatic retry of 429/5xx responses with backoff
- Normalized ``FeedItem`` records exposing every body field a platform may use
- Error categorization into ``FeedFetchError`` / ``FeedError``
"""

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

import feedparser
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config.settings import CreatorSyncSettings, HttpSettings
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedError, FeedFetchError, ErrorCode
from ..utils.validators import validate_url
from .content_extractor import html_to_text


FEED_ACCEPT_HEADER = "application/rss+xml, application/atom+xml, application/xml, text/xml"


def build_http_session(http: HttpSettings, user_agent: str, accept: Optional[str] = None) -> requests.Session:
    """Create a session that retries throttling and server errors.

    Args:
        http: HTTP section of the settings
        user_agent: User-Agent header sent with every request
        accept: Optional Accept header

    Returns:
        Configured ``requests.Session``
    """
    session = requests.Session()
    retry_strategy = Retry(
        total=http.max_retries,
        backoff_factor=http.backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["HEAD", "GET", "OPTIONS"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    headers = {"User-Agent": user_agent}
    if accept:
        headers["Accept"] = accept
    session.headers.update(headers)
    return session


@dataclass
class FeedItem:
    """One feed entry with every candidate body field kept separately."""

    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[str] = None
    content: Optional[str] = None
    content_encoded: Optional[str] = None
    snippet: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    body: Optional[str] = None
    published: Optional[str] = None
    published_parsed: Optional[time.struct_time] = None
    updated: Optional[str] = None
    updated_parsed: Optional[time.struct_time] = None

    @property
    def date_candidates(self) -> tuple:
        """Date fields in resolution order."""
        return (self.published, self.published_parsed, self.updated, self.updated_parsed)


@dataclass
class FeedMetadata:
    """Feed-level metadata."""

    title: str
    link: str
    description: str = ""
    version: Optional[str] = None


@dataclass
class ParsedFeed:
    """Result of fetching one feed."""

    feed_url: str
    metadata: FeedMetadata
    items: List[FeedItem] = field(default_factory=list)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


class FeedManager:
    """
    RSS feed fetcher with retrying transport and tolerant parsing.

    Minor markup problems (feedparser "bozo" feeds) are logged and the
    recovered entries are used; a document that yields no feed at all is a
    parse failure.
    """

    def __init__(self, settings: CreatorSyncSettings, session: Optional[requests.Session] = None):
        """Initialize feed manager.

        Args:
            settings: Application settings
            session: Pre-built session (a retrying session is created otherwise)
        """
        self.settings = settings
        self.logger = get_logger_for_component("feed_manager")
        self.session = session or build_http_session(
            settings.http, settings.http.feed_user_agent, accept=FEED_ACCEPT_HEADER
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "FeedManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def fetch_feed(self, feed_url: str) -> ParsedFeed:
        """
        Fetch and parse a feed.

        Args:
            feed_url: RSS/Atom feed URL

        Returns:
            Parsed feed metadata and items in document order

        Raises:
            FeedFetchError: If the feed cannot be fetched
            FeedError: If the response is not a parseable feed
        """
        if not validate_url(feed_url):
            raise FeedFetchError(
                f"Invalid feed URL: {feed_url}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_INVALID_URL,
                recoverable=False,
            )

        self.logger.info(f"Fetching RSS feed: {feed_url}")
        start_time = time.time()

        try:
            response = self.session.get(feed_url, timeout=self.settings.http.request_timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise FeedFetchError(
                f"Timed out fetching feed {feed_url}: {e}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e
        except requests.HTTPError as e:
            raise FeedFetchError(
                f"Failed to fetch feed {feed_url}: {e}",
                feed_url=feed_url,
                error_code=self._status_error_code(e.response),
            ) from e
        except requests.RequestException as e:
            raise FeedFetchError(
                f"Failed to fetch feed {feed_url}: {e}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

        self.logger.debug(
            f"Feed fetched in {time.time() - start_time:.2f}s, size: {len(response.content)} bytes"
        )
        return self.parse_feed(response.content, feed_url, headers=dict(response.headers))

    def parse_feed(self, document: Any, feed_url: str, headers: Optional[dict] = None) -> ParsedFeed:
        """Parse a fetched feed document.

        Raises:
            FeedError: If nothing feed-like could be recovered
        """
        parsed = feedparser.parse(document, response_headers=headers or {})

        if not parsed.entries and not parsed.get("version"):
            raise FeedError(
                f"Not a parseable feed {feed_url}: {parsed.get('bozo_exception') or 'no feed found'}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_PARSE_ERROR,
            )

        if parsed.bozo:
            # many feeds have minor formatting issues
            self.logger.warning(f"Feed parsing warning for {feed_url}: {parsed.get('bozo_exception')}")

        metadata = self._extract_feed_metadata(parsed.feed, feed_url, parsed.get("version"))
        items = [self._extract_item(entry) for entry in parsed.entries]

        self.logger.info(f"Parsed {len(items)} items from {feed_url}")
        return ParsedFeed(feed_url=feed_url, metadata=metadata, items=items)

    @staticmethod
    def _status_error_code(response: Optional[requests.Response]) -> ErrorCode:
        status = getattr(response, "status_code", None)
        if status == 404:
            return ErrorCode.FEED_NOT_FOUND
        if status in (401, 403):
            return ErrorCode.FEED_ACCESS_DENIED
        return ErrorCode.FEED_NETWORK_ERROR

    def _extract_feed_metadata(self, feed_data: Any, feed_url: str, version: Optional[str]) -> FeedMetadata:
        title = feed_data.get("title") or ""
        link = feed_data.get("link") or feed_url
        description = feed_data.get("subtitle") or feed_data.get("description") or ""
        return FeedMetadata(
            title=title.strip(),
            link=link.strip(),
            description=description.strip(),
            version=version or None,
        )

    def _extract_item(self, entry: Any) -> FeedItem:
        """Map a feedparser entry onto ``FeedItem``."""
        content = None
        if entry.get("content"):
            # list of {value, type, ...}; content:encoded lands here too
            content = _text(entry.content[0].get("value"))

        summary = _text(entry.get("summary"))
        description = _text(entry.get("description"))
        # RSS <description> is the body when no content element exists
        if content is None:
            content = summary

        snippet = html_to_text(content) if content else None

        return FeedItem(
            title=_text(entry.get("title")),
            link=_text(entry.get("link")),
            guid=_text(entry.get("id") or entry.get("guid")),
            content=content,
            content_encoded=_text(entry.get("content_encoded")),
            snippet=snippet or None,
            summary=summary,
            description=description,
            body=_text(entry.get("body")),
            published=_text(entry.get("published")),
            published_parsed=entry.get("published_parsed"),
            updated=_text(entry.get("updated")),
            updated_parsed=entry.get("updated_parsed"),
        )
