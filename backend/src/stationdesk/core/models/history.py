"""Song history model: one play event on a station."""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stationdesk.core.models.base import Base
from stationdesk.core.models.station import (
    Station,
    StationPlaylist,
    StationRequest,
)
from stationdesk.core.models.streamer import StationStreamer


class SongHistory(Base):
    """A single play. Timestamps are naive UTC."""

    __tablename__ = "song_history"
    __table_args__ = (
        Index("idx_history_station_time", "station_id", "timestamp_start"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(ForeignKey("stations.id"))
    playlist_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("station_playlists.id"), nullable=True
    )
    streamer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("station_streamers.id"), nullable=True
    )
    request_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("station_requests.id"), nullable=True
    )

    timestamp_start: Mapped[datetime] = mapped_column(index=True)
    timestamp_end: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    # NULL until listener measurement began; such rows are not real plays
    listeners_start: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    listeners_end: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    delta_total: Mapped[int] = mapped_column(Integer, default=0)

    title: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    artist: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    album: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    text: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    station: Mapped["Station"] = relationship()
    playlist: Mapped[Optional["StationPlaylist"]] = relationship()
    streamer: Mapped[Optional["StationStreamer"]] = relationship()
    request: Mapped[Optional["StationRequest"]] = relationship()
