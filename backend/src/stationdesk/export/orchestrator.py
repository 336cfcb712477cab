"""Mode dispatch between the paged JSON path and the streaming CSV path."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Callable,
    List,
    Optional,
    Sequence,
    Union,
)

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.core.config import settings
from stationdesk.export.batch import BatchIterator
from stationdesk.export.csv_writer import ColumnSpec, stream_csv
from stationdesk.export.paginator import Page, paginate
from stationdesk.export.query import QuerySpec


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ExportFormat":
        """Anything other than an explicit ``csv`` means JSON."""
        if value and value.strip().lower() == cls.CSV.value:
            return cls.CSV
        return cls.JSON


@dataclass(frozen=True)
class ExportTarget:
    format: ExportFormat = ExportFormat.JSON
    filename: Optional[str] = None
    columns: Sequence[ColumnSpec] = ()


@dataclass(frozen=True)
class ExportRequest:
    """What to export, independent of the output format.

    Attributes:
        spec: Base query, already scoped and date-filtered.
        search_criteria: Free-text predicates. Applied on the JSON path;
            the CSV path ignores them unless ``apply_search_to_csv`` is set.
        transform: Row -> DTO mapping for the JSON path.
    """

    spec: QuerySpec
    search_criteria: Sequence[Any] = ()
    apply_search_to_csv: bool = False
    page: Any = 1
    per_page: Any = None
    transform: Callable[[Any], Any] = lambda row: row

    def json_spec(self) -> QuerySpec:
        if not self.search_criteria:
            return self.spec
        return self.spec.where(*self.search_criteria)

    def csv_spec(self) -> QuerySpec:
        if self.apply_search_to_csv:
            return self.json_spec()
        return self.spec


@dataclass
class JsonPageResult:
    page: Page


@dataclass
class CsvStreamResult:
    """A CSV body ready to stream. The first data row is already fetched."""

    body: AsyncIterator[bytes]
    filename: Optional[str] = None
    media_type: str = "text/csv"


async def _chain(
    prefetched: List[bytes], rest: AsyncIterator[bytes]
) -> AsyncIterator[bytes]:
    for chunk in prefetched:
        yield chunk
    async for chunk in rest:
        yield chunk


async def _logged_stream(
    body: AsyncIterator[bytes], iterator: BatchIterator, label: str
) -> AsyncIterator[bytes]:
    started = time.monotonic()
    try:
        async for chunk in body:
            yield chunk
    except Exception as e:
        # Headers are already sent; the truncated body is the only signal left
        logger.error(
            f"CSV export {label} aborted after {iterator.rows_yielded} rows: {e}"
        )
        raise
    logger.info(
        f"CSV export {label} finished: {iterator.rows_yielded} rows in "
        f"{iterator.batches_fetched} batches ({time.monotonic() - started:.2f}s)"
    )


async def export(
    session: AsyncSession,
    request: ExportRequest,
    target: ExportTarget,
    batch_size: Optional[int] = None,
    max_duration: Optional[float] = None,
) -> Union[JsonPageResult, CsvStreamResult]:
    """Run an export in the format the caller asked for.

    Args:
        session: Request-scoped DB session.
        request: Query, search and paging inputs.
        target: Output format, plus filename and columns for CSV.
        batch_size: CSV fetch size, ``EXPORT_BATCH_SIZE`` by default.
        max_duration: Seconds a CSV export may run before it is cut off.

    The header and the first batch of a CSV export are fetched before
    returning, so an unreachable source fails the request cleanly instead of
    truncating an already-started response.
    """
    if target.format is ExportFormat.CSV:
        iterator = BatchIterator(
            session,
            request.csv_spec(),
            batch_size=batch_size or settings.EXPORT_BATCH_SIZE,
            max_duration=max_duration,
        )
        label = target.filename or "stream"
        logger.info(f"CSV export {label} started")

        body = stream_csv(iterator, target.columns)
        prefetched = [await body.__anext__()]
        try:
            prefetched.append(await body.__anext__())
        except StopAsyncIteration:
            pass

        return CsvStreamResult(
            body=_logged_stream(_chain(prefetched, body), iterator, label),
            filename=target.filename,
        )

    page = await paginate(
        session,
        request.json_spec(),
        request.page,
        request.per_page,
        request.transform,
    )
    return JsonPageResult(page=page)
