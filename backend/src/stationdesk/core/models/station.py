"""Station models: Station, StationPlaylist, StationRequest."""

from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stationdesk.core.models.base import Base, TimestampMixin


class Station(Base, TimestampMixin):
    """A broadcasting station. Every history and broadcast row belongs to one."""

    __tablename__ = "stations"

    id: Mapped[int] = mapped_column(primary_key=True)
    short_name: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str] = mapped_column(String)
    timezone: Mapped[str] = mapped_column(String, default="UTC")

    playlists: Mapped[List["StationPlaylist"]] = relationship(
        back_populates="station"
    )

    @property
    def timezone_info(self) -> ZoneInfo:
        """The station's configured timezone, UTC when unset or unknown."""
        try:
            return ZoneInfo(self.timezone or "UTC")
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")


class StationPlaylist(Base, TimestampMixin):
    __tablename__ = "station_playlists"

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(
        ForeignKey("stations.id"), index=True
    )
    name: Mapped[str] = mapped_column(String)

    station: Mapped["Station"] = relationship(back_populates="playlists")


class StationRequest(Base, TimestampMixin):
    """A listener request that led to a play."""

    __tablename__ = "station_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(
        ForeignKey("stations.id"), index=True
    )
    track_label: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
