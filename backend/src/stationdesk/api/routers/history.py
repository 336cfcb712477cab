"""Station song history: paged JSON or a full CSV timeline."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.api.deps import get_db, get_station
from stationdesk.api.pagination import with_links
from stationdesk.core.config import settings
from stationdesk.core.date_range import parse_date_range
from stationdesk.core.models import Station
from stationdesk.export.orchestrator import (
    CsvStreamResult,
    ExportFormat,
    ExportRequest,
    ExportTarget,
    export,
)
from stationdesk.history.columns import history_columns, timeline_filename
from stationdesk.history.generator import detailed
from stationdesk.history.query import history_spec, search_criteria

router = APIRouter()


@router.get("/{station_id}/history")
async def get_station_history(
    request: Request,
    start: Optional[str] = Query(None, description="Start date/time (YYYY-MM-DD or ISO 8601), station local time"),
    end: Optional[str] = Query(None, description="End date/time (YYYY-MM-DD or ISO 8601), station local time"),
    format: Optional[str] = Query(None, description="'csv' for a file download, JSON otherwise"),
    search_phrase: Optional[str] = Query(None, alias="searchPhrase"),
    page: Optional[str] = None,
    per_page: Optional[str] = None,
    sort: Optional[str] = Query(None, description="'asc' or 'desc' (default) by play time"),
    station: Station = Depends(get_station),
    db: AsyncSession = Depends(get_db),
):
    """Return song playback history for a station.

    The CSV export ignores ``searchPhrase``; only the JSON listing is
    narrowed by it.
    """
    tz = station.timezone_info
    date_range = parse_date_range(
        start, end, tz, default_days=settings.HISTORY_DEFAULT_DAYS
    )
    descending = (sort or "desc").strip().lower() != "asc"

    export_request = ExportRequest(
        spec=history_spec(station.id, date_range, descending=descending),
        search_criteria=search_criteria(search_phrase),
        page=page,
        per_page=per_page,
        transform=detailed,
    )

    fmt = ExportFormat.parse(format)
    if fmt is ExportFormat.CSV:
        target = ExportTarget(
            format=fmt,
            filename=timeline_filename(station, date_range),
            columns=history_columns(tz),
        )
    else:
        target = ExportTarget(format=fmt)

    result = await export(
        db,
        export_request,
        target,
        max_duration=settings.SYNC_LONG_EXECUTION_TIME,
    )

    if isinstance(result, CsvStreamResult):
        return StreamingResponse(
            result.body,
            media_type=result.media_type,
            headers={
                "Content-Disposition": f'attachment; filename="{result.filename}"'
            },
        )

    return with_links(request.url, result.page)
