"""CSV layout of the station timeline export."""

from datetime import datetime, timezone, tzinfo
from typing import List

from stationdesk.core.date_range import DateRange
from stationdesk.core.models import Station
from stationdesk.export.csv_writer import ColumnSpec

FILENAME_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Stored naive-UTC timestamp in the station's timezone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def format_clock(value: datetime) -> str:
    """12-hour clock without leading zero, e.g. ``3:05pm``."""
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d}{suffix}"


def history_columns(tz: tzinfo) -> List[ColumnSpec]:
    return [
        ColumnSpec(
            "Date", lambda sh: localize(sh.timestamp_start, tz).strftime("%Y-%m-%d")
        ),
        ColumnSpec("Time", lambda sh: format_clock(localize(sh.timestamp_start, tz))),
        ColumnSpec("Listeners", lambda sh: sh.listeners_start),
        ColumnSpec("Delta", lambda sh: sh.delta_total),
        ColumnSpec("Track", lambda sh: sh.title or sh.text),
        ColumnSpec("Artist", lambda sh: sh.artist),
        ColumnSpec("Playlist", lambda sh: sh.playlist.name if sh.playlist else ""),
        ColumnSpec(
            "Streamer",
            lambda sh: sh.streamer.effective_display_name if sh.streamer else "",
        ),
    ]


def timeline_filename(station: Station, date_range: DateRange) -> str:
    """``<short_name>_timeline_<start>_to_<end>.csv`` in station local time."""
    return "{}_timeline_{}_to_{}.csv".format(
        station.short_name,
        date_range.start.strftime(FILENAME_TIME_FORMAT),
        date_range.end.strftime(FILENAME_TIME_FORMAT),
    )
