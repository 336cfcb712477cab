"""Streamer broadcasts: list, download and delete recordings."""

from pathlib import PurePosixPath
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.api.deps import get_db, get_recording_storage, get_station
from stationdesk.api.pagination import with_links
from stationdesk.api.schemas import BroadcastRow, StatusResponse
from stationdesk.core.errors import NotFound, PreconditionFailed, SourceUnavailable
from stationdesk.core.models import (
    Station,
    StationStreamer,
    StationStreamerBroadcast,
)
from stationdesk.core.storage import RecordingStorage, iter_file, mimetype_or_default
from stationdesk.export.paginator import paginate
from stationdesk.export.query import QuerySpec
from stationdesk.history.generator import unix_timestamp

router = APIRouter()


async def _get_streamer(
    db: AsyncSession, station: Station, streamer_id: int
) -> StationStreamer:
    stmt = select(StationStreamer).where(
        StationStreamer.id == streamer_id,
        StationStreamer.station_id == station.id,
    )
    streamer = (await db.execute(stmt)).scalar_one_or_none()
    if streamer is None:
        raise NotFound("Streamer not found")
    return streamer


async def _get_broadcast(
    db: AsyncSession,
    station: Station,
    streamer_id: int,
    broadcast_id: int,
    for_update: bool = False,
) -> StationStreamerBroadcast:
    stmt = select(StationStreamerBroadcast).where(
        StationStreamerBroadcast.id == broadcast_id,
        StationStreamerBroadcast.station_id == station.id,
        StationStreamerBroadcast.streamer_id == streamer_id,
    )
    if for_update:
        stmt = stmt.with_for_update()

    broadcast = (await db.execute(stmt)).scalar_one_or_none()
    if broadcast is None:
        raise NotFound("Broadcast not found")
    return broadcast


@router.get("/{station_id}/streamer/{streamer_id}/broadcasts")
async def list_broadcasts(
    request: Request,
    streamer_id: int,
    page: Optional[str] = None,
    per_page: Optional[str] = None,
    station: Station = Depends(get_station),
    db: AsyncSession = Depends(get_db),
):
    """List a streamer's broadcasts, newest first."""
    streamer = await _get_streamer(db, station, streamer_id)

    spec = QuerySpec(
        select(StationStreamerBroadcast)
        .where(
            StationStreamerBroadcast.station_id == station.id,
            StationStreamerBroadcast.streamer_id == streamer.id,
        )
        .order_by(
            StationStreamerBroadcast.timestamp_start.desc(),
            StationStreamerBroadcast.id.desc(),
        )
    )

    def to_row(broadcast: StationStreamerBroadcast) -> BroadcastRow:
        links = None
        if broadcast.recording_path:
            route_params = {
                "station_id": str(station.id),
                "streamer_id": str(streamer.id),
                "broadcast_id": str(broadcast.id),
            }
            links = {
                "download": str(request.url_for("download_broadcast", **route_params)),
                "delete": str(request.url_for("delete_broadcast", **route_params)),
            }
        return BroadcastRow(
            id=broadcast.id,
            timestamp_start=unix_timestamp(broadcast.timestamp_start),
            timestamp_end=unix_timestamp(broadcast.timestamp_end),
            recording_path=broadcast.recording_path,
            links=links,
        )

    result = await paginate(db, spec, page, per_page, to_row)
    return with_links(request.url, result)


@router.get(
    "/{station_id}/streamer/{streamer_id}/broadcast/{broadcast_id}/download",
    name="download_broadcast",
)
async def download_broadcast(
    streamer_id: int,
    broadcast_id: int,
    station: Station = Depends(get_station),
    storage: RecordingStorage = Depends(get_recording_storage),
    db: AsyncSession = Depends(get_db),
):
    """Stream the recording of a broadcast."""
    broadcast = await _get_broadcast(db, station, streamer_id, broadcast_id)

    recording_path = broadcast.recording_path
    if not recording_path:
        raise PreconditionFailed("No recording available.")

    meta = storage.get_metadata(recording_path)
    mime = mimetype_or_default(storage, recording_path)
    handle = storage.read_stream(recording_path)
    filename = PurePosixPath(recording_path).name

    return StreamingResponse(
        iter_file(handle),
        media_type=mime,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(meta["size"]),
            "X-Accel-Buffering": "no",
        },
    )


@router.delete(
    "/{station_id}/streamer/{streamer_id}/broadcast/{broadcast_id}",
    name="delete_broadcast",
    response_model=StatusResponse,
)
async def delete_broadcast(
    streamer_id: int,
    broadcast_id: int,
    station: Station = Depends(get_station),
    storage: RecordingStorage = Depends(get_recording_storage),
    db: AsyncSession = Depends(get_db),
):
    """Delete a broadcast's recording and clear its path.

    A broadcast without a recording is left untouched and still reports
    success.
    """
    broadcast = await _get_broadcast(
        db, station, streamer_id, broadcast_id, for_update=True
    )

    recording_path = broadcast.recording_path
    if recording_path:
        try:
            storage.delete(recording_path)
        except FileNotFoundError:
            logger.warning(
                f"Recording {recording_path} for broadcast {broadcast.id} "
                "was already gone; clearing path"
            )
        except OSError as e:
            await db.rollback()
            logger.error(f"Could not delete recording {recording_path}: {e}")
            raise SourceUnavailable("Recording could not be deleted.") from e

        broadcast.clear_recording_path()
        try:
            await db.commit()
        except (OperationalError, DBAPIError) as e:
            # The file is already gone; the row keeps its stale path until a
            # later delete, which treats the missing file as done.
            await db.rollback()
            logger.error(
                f"Deleted recording {recording_path} but could not clear "
                f"broadcast {broadcast_id}: {e}"
            )
            raise SourceUnavailable("Recording deleted but not saved.") from e

    return StatusResponse()
