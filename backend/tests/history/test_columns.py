"""Tests for the timeline CSV layout."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from stationdesk.core.date_range import DateRange
from stationdesk.core.models import SongHistory, Station, StationStreamer
from stationdesk.history.columns import (
    format_clock,
    history_columns,
    localize,
    timeline_filename,
)

NEW_YORK = ZoneInfo("America/New_York")


@pytest.mark.parametrize(
    "hour,minute,expected",
    [
        (0, 5, "12:05am"),
        (9, 0, "9:00am"),
        (12, 30, "12:30pm"),
        (15, 5, "3:05pm"),
        (23, 59, "11:59pm"),
    ],
)
def test_format_clock(hour, minute, expected):
    assert format_clock(datetime(2024, 1, 1, hour, minute)) == expected


def test_localize_converts_from_utc():
    local = localize(datetime(2024, 7, 1, 3, 0), NEW_YORK)
    assert (local.day, local.hour) == (30, 23)


def _row(values):
    return [col.extract(values) for col in history_columns(NEW_YORK)]


def test_columns_render_in_station_timezone():
    sh = SongHistory(
        timestamp_start=datetime(2024, 1, 15, 2, 30),  # 21:30 the day before in NY
        listeners_start=12,
        delta_total=-3,
        title="Track",
        artist="Artist",
    )
    sh.streamer = StationStreamer(streamer_username="night_owl")

    assert _row(sh) == ["2024-01-14", "9:30pm", 12, -3, "Track", "Artist", "", "night_owl"]


def test_headers():
    assert [c.header for c in history_columns(NEW_YORK)] == [
        "Date", "Time", "Listeners", "Delta", "Track", "Artist", "Playlist", "Streamer",
    ]


def test_track_falls_back_to_text():
    sh = SongHistory(timestamp_start=datetime(2024, 1, 15, 12, 0), listeners_start=1, text="Live Set")
    assert _row(sh)[4] == "Live Set"


def test_timeline_filename_is_deterministic():
    station = Station(short_name="wxyz", name="WXYZ", timezone="America/New_York")
    dr = DateRange(
        datetime(2024, 1, 1, 0, 0, 0, tzinfo=NEW_YORK),
        datetime(2024, 1, 7, 23, 59, 59, tzinfo=NEW_YORK),
    )
    name = timeline_filename(station, dr)
    assert name == "wxyz_timeline_2024-01-01_00-00-00_to_2024-01-07_23-59-59.csv"
    assert timeline_filename(station, dr) == name
