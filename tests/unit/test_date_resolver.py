"""
Unit Tests for Publication Date Resolution
==========================================
"""

import time
from datetime import datetime, timedelta, timezone

import pytest

from creatorsync.ingestion.date_resolver import (
    UNKNOWN_DATE,
    date_token,
    parse_date,
    resolve_date,
    to_iso,
)


class TestResolveDate:
    def test_rfc822(self):
        dt = resolve_date("Tue, 05 Mar 2024 00:00:00 GMT")
        assert dt == datetime(2024, 3, 5, tzinfo=timezone.utc)

    def test_rfc822_offset_converted_to_utc(self):
        dt = resolve_date("Tue, 05 Mar 2024 01:30:00 +0200")
        assert dt == datetime(2024, 3, 4, 23, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw,expected", [
        ("2024-03-05T10:15:00Z", datetime(2024, 3, 5, 10, 15, tzinfo=timezone.utc)),
        ("2024-03-05T10:15:00+01:00", datetime(2024, 3, 5, 9, 15, tzinfo=timezone.utc)),
        ("2024-03-05", datetime(2024, 3, 5, tzinfo=timezone.utc)),
    ])
    def test_iso8601(self, raw, expected):
        assert resolve_date(raw) == expected

    def test_first_valid_candidate_wins(self):
        dt = resolve_date(None, "not-a-date", "2024-01-02", "2025-01-01")
        assert dt == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_struct_time_and_datetime(self):
        st = time.strptime("2024-06-01 12:00:00", "%Y-%m-%d %H:%M:%S")
        assert resolve_date(st) == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

        naive = datetime(2024, 6, 1, 12)
        assert resolve_date(naive) == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

        aware = datetime(2024, 6, 1, 12, tzinfo=timezone(timedelta(hours=-5)))
        assert resolve_date(aware) == datetime(2024, 6, 1, 17, tzinfo=timezone.utc)

    @pytest.mark.parametrize("bad", [None, "", "   ", "not-a-date", "2024-13-45", 12345, object()])
    def test_invalid_values_are_absent(self, bad):
        assert resolve_date(bad) is None
        assert parse_date(bad) is None

    def test_no_candidates(self):
        assert resolve_date() is None


class TestFormatting:
    def test_date_token(self):
        assert date_token(datetime(2024, 3, 5, 23, 59, tzinfo=timezone.utc)) == "2024-03-05"
        assert date_token(None) == UNKNOWN_DATE == "unknown"

    def test_to_iso_has_milliseconds_and_z(self):
        dt = datetime(2024, 3, 5, 0, 0, 0, 123456, tzinfo=timezone.utc)
        assert to_iso(dt) == "2024-03-05T00:00:00.123Z"
        assert to_iso(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "2024-03-05T00:00:00.000Z"

    def test_to_iso_none(self):
        assert to_iso(None) is None
