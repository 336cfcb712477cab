from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.api.deps import get_db
from stationdesk.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check system health and DB connection."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"disconnected: {str(e)}"

    return {"status": "ok", "database": db_status, "version": "0.1.0"}


@router.get("/config")
async def get_config():
    """Return public configuration."""
    return {
        "log_level": settings.LOG_LEVEL,
        "export_batch_size": settings.EXPORT_BATCH_SIZE,
        "pagination_default_per_page": settings.PAGINATION_DEFAULT_PER_PAGE,
        "pagination_max_per_page": settings.PAGINATION_MAX_PER_PAGE,
        "history_default_days": settings.HISTORY_DEFAULT_DAYS,
    }
