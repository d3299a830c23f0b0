"""
Feed Discovery
==============

Resolves the RSS/Atom feed URL of a blog when onboarding a content owner.

Substack publications always serve their feed at ``/feed``. Custom domains
are probed through the page's ``<link rel="alternate">`` tags first, then a
list of conventional feed paths, each checked by Content-Type.
"""

from typing import List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup

from ..config.settings import HttpSettings
from ..utils.logging import get_logger_for_component
from ..utils.validators import URLValidator
from .feed_manager import FEED_ACCEPT_HEADER, build_http_session


SUBSTACK_HOST = "substack.com"

# Conventional feed locations on custom domains, most common first
CUSTOM_FEED_PATHS = ["feed", "feed.xml", "rss", "rss.xml", "atom.xml", "index.xml"]

FEED_LINK_TYPES = ("application/rss+xml", "application/atom+xml")

FEED_CONTENT_MARKERS = ("xml", "rss", "atom")


def _split(url: str):
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def _is_substack_host(hostname: Optional[str]) -> bool:
    return bool(hostname) and hostname.endswith("." + SUBSTACK_HOST)


def is_substack_url(url: str) -> bool:
    """True for ``https://foo.substack.com/`` and ``https://substack.com/@foo`` style URLs."""
    parts = _split(url or "")
    if parts is None:
        return False
    host = parts.hostname or ""
    return _is_substack_host(host) or host == SUBSTACK_HOST


def get_feed_url(blog_url: str) -> str:
    """Preferred feed URL for a blog without any network access.

    Returns:
        ``{origin}/feed`` for Substack, ``{blog path}/feed`` for custom
        domains, or an empty string for unusable input
    """
    parts = _split(blog_url or "")
    if parts is None:
        return ""

    if _is_substack_host(parts.hostname):
        path = "/feed"
    elif parts.path in ("", "/"):
        path = "/feed"
    else:
        path = parts.path.rstrip("/") + "/feed"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def get_feed_candidates(blog_url: str) -> List[str]:
    """Candidate feed URLs for a blog, preferred first."""
    parts = _split(blog_url or "")
    if parts is None:
        return []

    base_path = "" if parts.path in ("", "/") else parts.path.rstrip("/")
    base = f"{parts.scheme}://{parts.netloc}{base_path}"

    if _is_substack_host(parts.hostname):
        return [f"{base}/feed"]
    return [f"{base}/{path}" for path in CUSTOM_FEED_PATHS]


def find_feed_links(html: str, base_url: str) -> List[str]:
    """Feed URLs advertised by ``<link>`` tags in ``html``, in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    found = []
    for tag in soup.find_all("link", href=True):
        link_type = (tag.get("type") or "").strip().lower()
        if not any(t in link_type for t in FEED_LINK_TYPES):
            continue
        # rel="alternate" preferred; a missing rel is tolerated
        rel = tag.get("rel")
        rel_values = [r.lower() for r in rel] if isinstance(rel, list) else ([rel.lower()] if rel else [])
        if rel_values and "alternate" not in rel_values:
            continue
        found.append(urljoin(base_url, tag["href"].strip()))
    return found


def _looks_like_feed(response: requests.Response) -> bool:
    content_type = (response.headers.get("content-type") or "").lower()
    return any(marker in content_type for marker in FEED_CONTENT_MARKERS)


class FeedDiscoverer:
    """Network side of feed discovery.

    Uses the loaded HTTP settings for timeouts and headers. A session passed
    in is left open; one built here is closed by ``close()``.
    """

    def __init__(self, http: HttpSettings, session: Optional[requests.Session] = None):
        self.http = http
        self._owns_session = session is None
        self.session = session or build_http_session(http, http.feed_user_agent, accept=FEED_ACCEPT_HEADER)
        self.logger = get_logger_for_component("feed_discovery")

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "FeedDiscoverer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def discover_from_html(self, blog_url: str) -> Optional[str]:
        """Fetch the blog page and return the first advertised feed URL, if any."""
        parts = _split(blog_url or "")
        if parts is None:
            return None
        base = urlunsplit(parts)

        try:
            response = self.session.get(base, timeout=self.http.request_timeout)
            html = response.text
        except requests.RequestException as e:
            self.logger.debug(f"Could not fetch {base} for feed discovery: {e}")
            return None

        links = find_feed_links(html, base)
        return links[0] if links else None

    def validate(self, url: str) -> bool:
        """True when the URL serves an XML/RSS/Atom Content-Type.

        HEAD is tried first; servers that reject HEAD (status >= 400) get a GET.
        """
        timeout = self.http.request_timeout
        try:
            response = self.session.head(url, timeout=timeout, allow_redirects=True)
            if _looks_like_feed(response):
                return True
            if response.status_code >= 400:
                response = self.session.get(url, timeout=timeout, allow_redirects=True)
                return _looks_like_feed(response)
        except requests.RequestException as e:
            self.logger.debug(f"Feed validation request failed for {url}: {e}")
        return False

    def resolve(self, blog_url: str) -> str:
        """Best feed URL for a blog.

        Substack resolves directly. Otherwise: the blog URL itself when it
        already is a feed, the page's advertised feed, then the first candidate
        path that validates, falling back to the first candidate unvalidated.
        """
        parts = _split(blog_url or "")
        if parts is None:
            return ""
        if _is_substack_host(parts.hostname):
            return get_feed_url(blog_url)

        normalized = blog_url.strip()

        if URLValidator.is_likely_feed_url(normalized) and self.validate(normalized):
            return normalized

        advertised = self.discover_from_html(normalized)
        if advertised and self.validate(advertised):
            self.logger.info(f"Discovered advertised feed {advertised}")
            return advertised

        candidates = get_feed_candidates(normalized)
        for candidate in candidates:
            if self.validate(candidate):
                self.logger.info(f"Validated feed candidate {candidate}")
                return candidate

        return candidates[0] if candidates else ""
