"""Offset pagination for the JSON path.

Only the rows of the requested page are fetched and transformed; the total
comes from a COUNT over the same filtered spec.
"""

import math
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.core.config import settings
from stationdesk.core.errors import SourceUnavailable
from stationdesk.export.query import QuerySpec

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of transformed rows plus pagination metadata."""

    page: int
    per_page: int
    total: int
    total_pages: int
    links: Dict[str, Optional[str]] = {}
    items: List[T]


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_page_params(
    page: Any,
    per_page: Any,
    default_per_page: Optional[int] = None,
    max_per_page: Optional[int] = None,
) -> Tuple[int, int]:
    """Clamp raw page parameters instead of rejecting them.

    Unparseable or non-positive ``page`` becomes 1. Unparseable or
    non-positive ``per_page`` becomes the default; larger than the maximum
    becomes the maximum.
    """
    default_per_page = default_per_page or settings.PAGINATION_DEFAULT_PER_PAGE
    max_per_page = max_per_page or settings.PAGINATION_MAX_PER_PAGE

    page_num = _to_int(page)
    if page_num is None or page_num < 1:
        page_num = 1

    size = _to_int(per_page)
    if size is None or size < 1:
        size = default_per_page
    size = min(size, max_per_page)

    return page_num, size


async def count(session: AsyncSession, spec: QuerySpec) -> int:
    try:
        total = await session.scalar(spec.count_statement())
    except (OperationalError, DBAPIError) as e:
        logger.error(f"Count query failed: {e}")
        raise SourceUnavailable("Could not read from the data source.") from e
    return int(total or 0)


async def paginate(
    session: AsyncSession,
    spec: QuerySpec,
    page: Any,
    per_page: Any,
    transform: Callable[[Any], T],
) -> Page[T]:
    """Fetch one page of ``spec`` and apply ``transform`` to its rows only.

    A page past the end yields no items but still reports the real total.
    """
    page, per_page = normalize_page_params(page, per_page)
    total = await count(session, spec)
    total_pages = math.ceil(total / per_page) if total else 0

    offset = (page - 1) * per_page
    rows: list = []
    if offset < total:
        try:
            result = await session.execute(spec.slice(offset, per_page))
            rows = list(result.scalars().all())
        except (OperationalError, DBAPIError) as e:
            logger.error(f"Page query failed (page={page}): {e}")
            raise SourceUnavailable("Could not read from the data source.") from e

    return Page(
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
        items=[transform(row) for row in rows],
    )
