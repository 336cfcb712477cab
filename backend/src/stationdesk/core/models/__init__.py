"""SQLAlchemy models for the StationDesk application.

Submodules:
- base: Base, TimestampMixin
- station: Station, StationPlaylist, StationRequest
- streamer: StationStreamer, StationStreamerBroadcast
- history: SongHistory
- system: SystemSetting
"""

from stationdesk.core.models.base import Base, TimestampMixin
from stationdesk.core.models.station import (
    Station,
    StationPlaylist,
    StationRequest,
)
from stationdesk.core.models.streamer import (
    StationStreamer,
    StationStreamerBroadcast,
)
from stationdesk.core.models.history import SongHistory
from stationdesk.core.models.system import SystemSetting

__all__ = [
    "Base",
    "TimestampMixin",
    "Station",
    "StationPlaylist",
    "StationRequest",
    "StationStreamer",
    "StationStreamerBroadcast",
    "SongHistory",
    "SystemSetting",
]
