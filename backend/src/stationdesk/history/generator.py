"""Maps SongHistory rows to their API representation."""

from datetime import datetime, timezone
from typing import Optional

from stationdesk.api.schemas import DetailedSongHistory, SongInfo
from stationdesk.core.models import SongHistory


def unix_timestamp(value: Optional[datetime]) -> Optional[int]:
    """Stored naive-UTC datetime to epoch seconds."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def detailed(sh: SongHistory) -> DetailedSongHistory:
    duration = 0
    if sh.timestamp_end is not None:
        duration = max(int((sh.timestamp_end - sh.timestamp_start).total_seconds()), 0)

    return DetailedSongHistory(
        sh_id=sh.id,
        played_at=unix_timestamp(sh.timestamp_start),
        duration=duration,
        listeners_start=sh.listeners_start,
        listeners_end=sh.listeners_end,
        delta_total=sh.delta_total or 0,
        is_request=sh.request_id is not None,
        playlist=sh.playlist.name if sh.playlist else "",
        streamer=sh.streamer.effective_display_name if sh.streamer else "",
        song=SongInfo(
            title=sh.title or "",
            artist=sh.artist or "",
            album=sh.album or "",
            text=sh.text or _song_text(sh),
        ),
    )


def _song_text(sh: SongHistory) -> str:
    if sh.artist and sh.title:
        return f"{sh.artist} - {sh.title}"
    return sh.title or sh.artist or ""
