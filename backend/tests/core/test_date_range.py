"""Tests for stationdesk.core.date_range."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from stationdesk.core.date_range import DateRange, parse_date_range
from stationdesk.core.errors import InvalidDateRange

UTC = ZoneInfo("UTC")
CHICAGO = ZoneInfo("America/Chicago")
NOW = datetime(2024, 3, 20, 15, 30, tzinfo=timezone.utc)


class TestParseDateRange:
    def test_defaults_to_fourteen_days_ending_today(self):
        dr = parse_date_range(None, None, UTC, now=NOW)
        assert dr.start == datetime(2024, 3, 7, 0, 0, 0, tzinfo=UTC)
        assert dr.end == datetime(2024, 3, 20, 23, 59, 59, tzinfo=UTC)

    def test_default_window_length_is_configurable(self):
        dr = parse_date_range(None, None, UTC, default_days=1, now=NOW)
        assert dr.start.date() == dr.end.date() == NOW.date()

    def test_end_only_anchors_default_window_at_end(self):
        dr = parse_date_range(None, "2024-01-31", UTC, now=NOW)
        assert dr.start == datetime(2024, 1, 18, 0, 0, 0, tzinfo=UTC)
        assert dr.end == datetime(2024, 1, 31, 23, 59, 59, tzinfo=UTC)

    def test_blank_strings_are_treated_as_absent(self):
        assert parse_date_range("  ", "", UTC, now=NOW) == parse_date_range(
            None, None, UTC, now=NOW
        )

    def test_date_only_bounds_cover_whole_days(self):
        dr = parse_date_range("2024-03-01", "2024-03-02", UTC, now=NOW)
        assert dr.start == datetime(2024, 3, 1, 0, 0, 0, tzinfo=UTC)
        assert dr.end == datetime(2024, 3, 2, 23, 59, 59, tzinfo=UTC)

    def test_datetime_bounds_are_minute_inclusive(self):
        dr = parse_date_range(
            "2024-03-01T10:15:42", "2024-03-01T11:45:03", UTC, now=NOW
        )
        assert dr.start == datetime(2024, 3, 1, 10, 15, 0, tzinfo=UTC)
        assert dr.end == datetime(2024, 3, 1, 11, 45, 59, tzinfo=UTC)

    def test_bounds_are_read_in_station_timezone(self):
        dr = parse_date_range("2024-03-01", "2024-03-01", CHICAGO, now=NOW)
        # Chicago is UTC-6 in early March
        assert dr.start_utc == datetime(2024, 3, 1, 6, 0, 0)
        assert dr.end_utc == datetime(2024, 3, 2, 5, 59, 59)

    def test_aware_input_is_converted_to_station_timezone(self):
        dr = parse_date_range("2024-03-01T12:00:00Z", "2024-03-02", CHICAGO, now=NOW)
        assert dr.start.tzinfo == CHICAGO
        assert dr.start_utc == datetime(2024, 3, 1, 12, 0, 0)

    def test_unparseable_start_raises(self):
        with pytest.raises(InvalidDateRange):
            parse_date_range("yesterday-ish", None, UTC, now=NOW)

    def test_unparseable_end_raises(self):
        with pytest.raises(InvalidDateRange):
            parse_date_range("2024-03-01", "2024-13-45", UTC, now=NOW)

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidDateRange):
            parse_date_range("2024-03-05", "2024-03-01", UTC, now=NOW)

    def test_single_day_range_is_valid(self):
        dr = parse_date_range("2024-03-05", "2024-03-05", UTC, now=NOW)
        assert dr.start < dr.end


class TestDateRange:
    def test_requires_aware_bounds(self):
        with pytest.raises(ValueError):
            DateRange(datetime(2024, 1, 1), datetime(2024, 1, 2))

    def test_contains_is_inclusive(self):
        dr = DateRange(
            datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC),
            datetime(2024, 1, 1, 23, 59, 59, tzinfo=UTC),
        )
        assert dr.contains(datetime(2024, 1, 1, 0, 0, 0))
        assert dr.contains(datetime(2024, 1, 1, 23, 59, 59))
        assert not dr.contains(datetime(2024, 1, 2, 0, 0, 0))

    def test_contains_accepts_aware_values(self):
        dr = DateRange(
            datetime(2024, 1, 1, 0, 0, 0, tzinfo=CHICAGO),
            datetime(2024, 1, 1, 23, 59, 59, tzinfo=CHICAGO),
        )
        assert dr.contains(datetime(2024, 1, 1, 7, 0, 0, tzinfo=timezone.utc))
        assert not dr.contains(datetime(2024, 1, 1, 5, 0, 0, tzinfo=timezone.utc))
