"""
Post URL Normalization
======================

Canonicalizes post URLs into the stable string used as the dedup key.
"""

from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit


def normalize_post_url(url: str, base: Optional[str] = None) -> str:
    """Canonicalize a post URL for deduplication.

    Resolves ``url`` against ``base``, drops the fragment, keeps the query
    string as-is and strips trailing slashes from the path unless the path
    is the root. Normalizing an already-normalized URL returns it unchanged.
    Input that cannot be turned into an absolute URL is returned trimmed and
    otherwise unchanged.

    Args:
        url: Raw URL as found in a feed, page or metadata file
        base: Optional base URL for relative links

    Returns:
        Canonical absolute URL, or the trimmed input
    """
    if not isinstance(url, str):
        return url
    raw = url.strip()
    if not raw:
        return raw

    try:
        absolute = urljoin(base.strip(), raw) if base else raw
        parts = urlsplit(absolute)
        if not parts.scheme or not parts.netloc:
            return raw
        # Accessing the port validates it; a bad port raises ValueError
        parts.port
    except ValueError:
        return raw

    # "/p/a//" and "/p/a/" both become "/p/a"
    path = parts.path.rstrip("/") or "/"

    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))
