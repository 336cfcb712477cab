import datetime
import shutil
from typing import Any, AsyncGenerator

from loguru import logger
from sqlalchemy import Engine, event, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from stationdesk.core.config import Settings, settings
from stationdesk.core.models import Base, SystemSetting

# busy_timeout lets SQLite wait instead of failing with "database is locked"
engine = create_async_engine(
    settings.DB_URL,
    echo=settings.DB_ECHO,
    connect_args={"check_same_thread": False, "timeout": 30},
)


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    """Sets performance pragmas for SQLite.

    WAL mode lets a long CSV export read while broadcast deletes write.
    """
    if settings.DB_URL.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA busy_timeout=30000")  # 30 seconds
        cursor.close()


AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting DB session.

    Each request gets its own session; nothing is shared across requests.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def backup_db() -> None:
    """Create a point-in-time backup of the current database file."""
    src = settings.DB_PATH
    if not src.exists():
        return

    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    dst = src.parent / f"{settings.DB_NAME}.{timestamp}.bak"

    try:
        shutil.copy2(src, dst)
        logger.info(f"Database backed up to {dst}")

        # Keep the last N backups
        max_backups = settings.DB_BACKUP_RETENTION
        backups = sorted(src.parent.glob(f"{settings.DB_NAME}.*.bak"))
        if len(backups) > max_backups:
            for b in backups[:-max_backups]:
                b.unlink()
    except (OSError, shutil.Error) as e:
        logger.error(f"Failed to backup database: {e}")


async def init_db(force: bool = False) -> None:
    """Initialize database tables according to current models.

    Args:
        force: If True, drops all existing tables and re-creates them.
            A backup of the database file is taken first.
    """
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if force:
        logger.warning(
            "FORCED database initialization. Existing data might be lost."
        )
        await backup_db()

    async with engine.begin() as conn:
        if force:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready.")


def apply_setting_override(
    target: Settings, key: str, value: str
) -> bool:
    """Coerce a stored string onto a settings attribute of the same type.

    Returns False when the key is unknown or the value does not convert.
    """
    if key not in type(target).model_fields:
        return False

    orig = getattr(target, key)
    try:
        # bool before int: bool is an int subclass
        if isinstance(orig, bool):
            coerced: Any = value.strip().lower() in ("1", "true", "yes", "on")
        elif isinstance(orig, float):
            coerced = float(value)
        elif isinstance(orig, int):
            coerced = int(value)
        else:
            coerced = value
    except ValueError:
        logger.warning(f"Ignoring setting override {key}={value!r}: bad type")
        return False

    setattr(target, key, coerced)
    return True


async def load_dynamic_settings(session: AsyncSession) -> int:
    """Apply every ``system_settings`` row onto the global settings."""
    res = await session.execute(select(SystemSetting))
    applied = 0
    for row in res.scalars().all():
        if apply_setting_override(settings, row.key, row.value):
            applied += 1
    if applied:
        logger.info(f"Applied {applied} dynamic setting override(s)")
    return applied
