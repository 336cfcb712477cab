from typing import Dict, Optional

from pydantic import BaseModel


class SongInfo(BaseModel):
    title: str = ""
    artist: str = ""
    album: str = ""
    text: str = ""


class DetailedSongHistory(BaseModel):
    """One play as returned by the station history endpoint."""
    sh_id: int
    played_at: int  # Unix timestamp (UTC)
    duration: int = 0  # Seconds
    listeners_start: Optional[int] = None
    listeners_end: Optional[int] = None
    delta_total: int = 0
    is_request: bool = False
    playlist: str = ""
    streamer: str = ""
    song: SongInfo


class BroadcastRow(BaseModel):
    """A streamer broadcast in the broadcast list."""
    id: int
    timestamp_start: int  # Unix timestamp (UTC)
    timestamp_end: Optional[int] = None
    recording_path: Optional[str] = None
    links: Optional[Dict[str, str]] = None  # Only when a recording exists


class StatusResponse(BaseModel):
    success: bool = True
    message: str = "Changes saved successfully."


class ErrorResponse(BaseModel):
    code: int
    type: str
    message: str
    success: bool = False
