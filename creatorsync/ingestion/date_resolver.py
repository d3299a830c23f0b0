"""
Publication Date Resolution
===========================

Extracts and validates a publication date from a feed item's candidate date
fields, with a deterministic ``unknown`` fallback.
"""

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional


UNKNOWN_DATE = "unknown"


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_string(raw: str) -> Optional[datetime]:
    value = raw.strip()
    if not value:
        return None

    # RFC 822 / RFC 2822, the RSS pubDate format
    try:
        parsed = parsedate_to_datetime(value)
        if parsed is not None:
            return _to_utc(parsed)
    except (TypeError, ValueError, IndexError):
        pass

    # ISO 8601 / W3C-DTF, the Atom format (a trailing Z is accepted)
    iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return _to_utc(datetime.fromisoformat(iso))
    except ValueError:
        return None


def parse_date(candidate: Any) -> Optional[datetime]:
    """Parse one candidate value; anything unusable yields None."""
    if candidate is None:
        return None
    try:
        if isinstance(candidate, datetime):
            return _to_utc(candidate)
        if isinstance(candidate, time.struct_time):
            return datetime(*candidate[:6], tzinfo=timezone.utc)
        if isinstance(candidate, str):
            return _parse_string(candidate)
    except (ValueError, TypeError, OverflowError):
        return None
    return None


def resolve_date(*candidates: Any) -> Optional[datetime]:
    """Return the first candidate that parses to a valid instant.

    Candidates are tried in the order given. Strings (RFC 822 or ISO 8601,
    date-only accepted), ``datetime`` and ``time.struct_time`` values are
    understood; invalid values count as absent. Never raises.

    Returns:
        Timezone-aware UTC datetime, or None when no candidate is usable
    """
    for candidate in candidates:
        parsed = parse_date(candidate)
        if parsed is not None:
            return parsed
    return None


def date_token(dt: Optional[datetime]) -> str:
    """``YYYY-MM-DD`` for storage keys, or ``unknown``."""
    if dt is None:
        return UNKNOWN_DATE
    return _to_utc(dt).strftime("%Y-%m-%d")


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """ISO 8601 UTC with milliseconds and ``Z`` (``2024-03-05T00:00:00.000Z``)."""
    if dt is None:
        return None
    dt = _to_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
