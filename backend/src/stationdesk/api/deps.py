from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.core.db import AsyncSessionLocal
from stationdesk.core.errors import NotFound
from stationdesk.core.models import Station
from stationdesk.core.storage import RecordingStorage


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async DB session."""
    async with AsyncSessionLocal() as session:
        yield session


async def get_station(
    station_id: str, db: AsyncSession = Depends(get_db)
) -> Station:
    """Resolve the station (tenant) from the route, by id or short name.

    Every station-scoped query takes its scope from this value.
    """
    if station_id.isdigit():
        stmt = select(Station).where(Station.id == int(station_id))
    else:
        stmt = select(Station).where(Station.short_name == station_id)

    station = (await db.execute(stmt)).scalar_one_or_none()
    if station is None:
        raise NotFound("Station not found")
    return station


def get_recording_storage(
    station: Station = Depends(get_station),
) -> RecordingStorage:
    return RecordingStorage.for_station(station)
