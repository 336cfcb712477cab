from datetime import timedelta

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from stationdesk.api.deps import get_db, get_recording_storage, get_station
from stationdesk.api.main import app
# Import all models to ensure Base.metadata is populated
from stationdesk.core import models  # noqa
from stationdesk.core.models import Base, SongHistory, Station
from stationdesk.core.storage import RecordingStorage

# ============================================================================
# TEST DATABASE CONFIGURATION
# ============================================================================
# Tests run against an in-memory database, never the configured DB file.
# ============================================================================

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(scope="function")
async def db_engine():
    """Create test database tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="function")
async def db_session(db_engine):
    """Provide a test database session."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def recordings_dir(tmp_path):
    """Root under which each station's recordings directory is created."""
    root = tmp_path / "stations"
    root.mkdir()
    return root


@pytest.fixture(scope="function")
async def client(db_session, recordings_dir):
    """Create an async test client with DB and storage overrides."""

    async def override_get_db():
        yield db_session

    def override_get_recording_storage(
        station: Station = Depends(get_station),
    ):
        return RecordingStorage.for_station(station, base_dir=recordings_dir)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recording_storage] = override_get_recording_storage
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(client):
    return client


@pytest.fixture
async def station(db_session):
    s = Station(short_name="radio_one", name="Radio One", timezone="UTC")
    db_session.add(s)
    await db_session.commit()
    return s


async def add_plays(
    db_session, station, count, start, step=timedelta(minutes=1), **fields
):
    """Insert ``count`` measured plays starting at ``start``, ``step`` apart."""
    plays = []
    for i in range(count):
        sh = SongHistory(
            station_id=station.id,
            timestamp_start=start + step * i,
            listeners_start=fields.get("listeners_start", 10),
            delta_total=fields.get("delta_total", 0),
            title=fields.get("title", f"Song {i}"),
            artist=fields.get("artist", f"Artist {i}"),
        )
        plays.append(sh)
    db_session.add_all(plays)
    await db_session.commit()
    return plays


@pytest.fixture
def plays_factory():
    return add_plays

