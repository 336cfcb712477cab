"""Streamer models: StationStreamer, StationStreamerBroadcast."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stationdesk.core.models.base import Base, TimestampMixin


class StationStreamer(Base, TimestampMixin):
    """A live DJ account able to broadcast on a station."""

    __tablename__ = "station_streamers"

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(
        ForeignKey("stations.id"), index=True
    )
    streamer_username: Mapped[str] = mapped_column(String)
    display_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    broadcasts: Mapped[List["StationStreamerBroadcast"]] = relationship(
        back_populates="streamer"
    )

    @property
    def effective_display_name(self) -> str:
        return self.display_name or self.streamer_username


class StationStreamerBroadcast(Base, TimestampMixin):
    """One live session of a streamer, optionally recorded to storage."""

    __tablename__ = "station_streamer_broadcasts"
    __table_args__ = (
        Index("idx_broadcast_streamer_time", "streamer_id", "timestamp_start"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(
        ForeignKey("stations.id"), index=True
    )
    streamer_id: Mapped[int] = mapped_column(
        ForeignKey("station_streamers.id")
    )
    timestamp_start: Mapped[datetime] = mapped_column()
    timestamp_end: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    # Relative to the station's recordings directory
    recording_path: Mapped[Optional[str]] = mapped_column(
        String, nullable=True
    )

    streamer: Mapped["StationStreamer"] = relationship(
        back_populates="broadcasts"
    )

    def clear_recording_path(self) -> None:
        self.recording_path = None
