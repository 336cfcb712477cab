"""Builds the station song-history query."""

from typing import Any, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from stationdesk.core.date_range import DateRange
from stationdesk.core.models import SongHistory
from stationdesk.export.query import QuerySpec


def history_spec(
    station_id: int, date_range: DateRange, descending: bool = True
) -> QuerySpec:
    """Plays of one station that started within ``date_range``.

    The station scope and the listeners_start check are always applied.
    Keyed on start time with the row id as tie-break, so pages are stable
    and batch reads can seek past the last row seen.
    """
    if station_id is None:
        raise ValueError("station_id is required")

    stmt = (
        select(SongHistory)
        .options(
            selectinload(SongHistory.playlist),
            selectinload(SongHistory.streamer),
            selectinload(SongHistory.request),
        )
        .where(SongHistory.station_id == station_id)
        .where(
            SongHistory.timestamp_start >= date_range.start_utc,
            SongHistory.timestamp_start <= date_range.end_utc,
        )
        .where(SongHistory.listeners_start.is_not(None))
    )

    return QuerySpec(stmt).keyed(
        SongHistory.timestamp_start, SongHistory.id, descending=descending
    )


def _escape_like(value: str) -> str:
    return (
        value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


def search_criteria(phrase: Optional[str]) -> List[Any]:
    """Case-insensitive substring match on title OR artist.

    A missing or blank phrase adds nothing.
    """
    if phrase is None:
        return []
    phrase = phrase.strip()
    if not phrase:
        return []

    pattern = f"%{_escape_like(phrase)}%"
    return [
        or_(
            SongHistory.title.ilike(pattern, escape="\\"),
            SongHistory.artist.ilike(pattern, escape="\\"),
        )
    ]
