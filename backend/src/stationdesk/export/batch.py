"""Read-only batch iteration over a QuerySpec.

Rows are fetched ``batch_size`` at a time. Keyed specs seek past the last
row seen, so rows written during the export cannot shift later batches;
other specs fall back to LIMIT/OFFSET. Between batches the session identity
map is cleared and the read transaction ended, so memory is bounded by one
batch and no transaction spans the whole export.
"""

import time
from typing import Any, AsyncIterator, Optional

from loguru import logger
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from stationdesk.core.errors import ExportTimeout, SourceUnavailable
from stationdesk.export.query import QuerySpec

DEFAULT_BATCH_SIZE = 100


class BatchIterator:
    """Async iterator over the rows of a QuerySpec, one batch in flight.

    Each ``async for`` over the same instance restarts from the first row.

    Attributes:
        batches_fetched: Number of batch queries issued by the last run.
        rows_yielded: Number of rows produced by the last run.
        max_batch_rows: Largest batch held in memory during the last run.
    """

    clock = staticmethod(time.monotonic)

    def __init__(
        self,
        session: AsyncSession,
        spec: QuerySpec,
        batch_size: int = DEFAULT_BATCH_SIZE,
        clear_session: bool = True,
        max_duration: Optional[float] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.session = session
        self.spec = spec
        self.batch_size = batch_size
        self.clear_session = clear_session
        self.max_duration = max_duration

        self.batches_fetched = 0
        self.rows_yielded = 0
        self.max_batch_rows = 0

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iterate()

    async def _fetch(self, last_key: Optional[tuple], offset: int) -> list:
        if self.spec.keys:
            stmt = self.spec.after(last_key, self.batch_size)
        else:
            stmt = self.spec.slice(offset, self.batch_size)
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except (OperationalError, DBAPIError) as e:
            logger.error(
                f"Batch fetch failed after {self.rows_yielded} rows: {e}"
            )
            raise SourceUnavailable("Could not read from the data source.") from e

    async def _release(self) -> None:
        """Drop the batch from the identity map and end the read transaction."""
        self.session.expunge_all()
        await self.session.rollback()

    async def _iterate(self) -> AsyncIterator[Any]:
        self.batches_fetched = 0
        self.rows_yielded = 0
        self.max_batch_rows = 0

        started = self.clock()
        last_key = None
        offset = 0
        while True:
            if (
                self.max_duration is not None
                and self.clock() - started > self.max_duration
            ):
                logger.warning(
                    f"Batch iteration stopped after {self.rows_yielded} rows: "
                    f"exceeded {self.max_duration}s"
                )
                raise ExportTimeout()

            batch = await self._fetch(last_key, offset)
            self.batches_fetched += 1
            self.max_batch_rows = max(self.max_batch_rows, len(batch))
            logger.debug(
                f"Fetched batch {self.batches_fetched} ({len(batch)} rows)"
            )
            if batch and self.spec.keys:
                last_key = self.spec.key_of(batch[-1])

            for row in batch:
                self.rows_yielded += 1
                yield row

            if self.clear_session:
                await self._release()

            if len(batch) < self.batch_size:
                break
            offset += self.batch_size


def iterate(
    session: AsyncSession,
    spec: QuerySpec,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_duration: Optional[float] = None,
) -> BatchIterator:
    """Shorthand for ``BatchIterator(session, spec, batch_size)``."""
    return BatchIterator(
        session, spec, batch_size=batch_size, max_duration=max_duration
    )
