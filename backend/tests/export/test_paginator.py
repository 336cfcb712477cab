"""Tests for the JSON-path paginator."""

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from stationdesk.core.errors import SourceUnavailable
from stationdesk.core.models import SongHistory
from stationdesk.export.paginator import normalize_page_params, paginate
from stationdesk.export.query import QuerySpec

START = datetime(2024, 1, 1, 0, 0)


def _spec():
    return QuerySpec(
        select(SongHistory).order_by(
            SongHistory.timestamp_start.desc(), SongHistory.id.desc()
        )
    )


class TestNormalizePageParams:
    def test_valid_values_pass_through(self):
        assert normalize_page_params(3, 50, 25, 500) == (3, 50)

    def test_strings_are_parsed(self):
        assert normalize_page_params("2", " 10 ", 25, 500) == (2, 10)

    def test_bad_page_becomes_first(self):
        assert normalize_page_params(0, 10, 25, 500)[0] == 1
        assert normalize_page_params(-4, 10, 25, 500)[0] == 1
        assert normalize_page_params("abc", 10, 25, 500)[0] == 1
        assert normalize_page_params(None, 10, 25, 500)[0] == 1

    def test_bad_per_page_becomes_default(self):
        assert normalize_page_params(1, 0, 25, 500)[1] == 25
        assert normalize_page_params(1, "x", 25, 500)[1] == 25
        assert normalize_page_params(1, None, 25, 500)[1] == 25

    def test_per_page_is_capped(self):
        assert normalize_page_params(1, 10_000, 25, 500)[1] == 500


@pytest.mark.asyncio
async def test_250_rows_in_pages_of_100(db_session, station, plays_factory):
    await plays_factory(db_session, station, 250, START)

    sizes = []
    for number in (1, 2, 3, 4):
        page = await paginate(db_session, _spec(), number, 100, lambda r: r.id)
        assert page.total == 250
        assert page.total_pages == 3
        sizes.append(len(page.items))

    assert sizes == [100, 100, 50, 0]


@pytest.mark.asyncio
async def test_pages_neither_repeat_nor_skip(db_session, station, plays_factory):
    """Identical timestamps are ordered by id, keeping pages stable."""
    same_time = datetime(2024, 1, 1, 12, 0)
    plays = []
    for _ in range(3):
        plays += await plays_factory(db_session, station, 10, same_time)

    seen = []
    for number in range(1, 6):
        page = await paginate(db_session, _spec(), number, 7, lambda r: r.id)
        seen.extend(page.items)

    assert len(seen) == len(set(seen)) == 30
    assert set(seen) == {p.id for p in plays}


@pytest.mark.asyncio
async def test_transform_only_runs_on_page_rows(db_session, station, plays_factory):
    await plays_factory(db_session, station, 60, START)
    calls = []

    def transform(row):
        calls.append(row.id)
        return {"id": row.id}

    page = await paginate(db_session, _spec(), 2, 25, transform)

    assert len(calls) == 25
    assert page.items == [{"id": i} for i in calls]


@pytest.mark.asyncio
async def test_order_follows_spec(db_session, station, plays_factory):
    await plays_factory(db_session, station, 10, START)

    page = await paginate(db_session, _spec(), 1, 10, lambda r: r.timestamp_start)

    assert page.items == sorted(page.items, reverse=True)


@pytest.mark.asyncio
async def test_total_reflects_filters(db_session, station, plays_factory):
    await plays_factory(db_session, station, 8, START)
    await plays_factory(db_session, station, 4, START, listeners_start=None)
    spec = _spec().where(SongHistory.listeners_start.is_not(None))

    page = await paginate(db_session, spec, 1, 5, lambda r: r.id)

    assert page.total == 8
    assert page.total_pages == 2


@pytest.mark.asyncio
async def test_invalid_params_are_clamped(db_session, station, plays_factory):
    await plays_factory(db_session, station, 3, START)

    page = await paginate(db_session, _spec(), -1, 0, lambda r: r.id)

    assert page.page == 1
    assert page.per_page == 25
    assert len(page.items) == 3


@pytest.mark.asyncio
async def test_empty_source(db_session, station):
    page = await paginate(db_session, _spec(), 1, 10, lambda r: r.id)
    assert page.total == 0
    assert page.total_pages == 0
    assert page.items == []


class _BrokenSession:
    async def scalar(self, stmt):
        raise OperationalError("SELECT", {}, Exception("database is gone"))


@pytest.mark.asyncio
async def test_unreachable_source_raises():
    with pytest.raises(SourceUnavailable):
        await paginate(_BrokenSession(), _spec(), 1, 10, lambda r: r)
