"""Streaming CSV output.

Rows are encoded one at a time as they come off the source iterator, so the
full result set is never held in memory.
"""

import csv
import io
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    BinaryIO,
    Callable,
    Sequence,
)

from loguru import logger

from stationdesk.core.errors import SinkWriteError


@dataclass(frozen=True)
class ColumnSpec:
    """A CSV column: header text plus a row -> cell extractor."""

    header: str
    extract: Callable[[Any], Any]


def _cell(value: Any) -> str:
    # Missing optional fields render as empty, never "None"
    if value is None:
        return ""
    return str(value)


class _RowEncoder:
    """Encodes single rows with the csv module into a reusable buffer."""

    def __init__(self, encoding: str = "utf-8"):
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer)
        self._encoding = encoding

    def encode(self, values: Sequence[Any]) -> bytes:
        self._writer.writerow([_cell(v) for v in values])
        data = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate(0)
        return data.encode(self._encoding)


async def stream_csv(
    rows: AsyncIterable[Any], columns: Sequence[ColumnSpec]
) -> AsyncIterator[bytes]:
    """Yield the header line, then one encoded line per source row."""
    encoder = _RowEncoder()
    yield encoder.encode([col.header for col in columns])
    async for row in rows:
        yield encoder.encode([col.extract(row) for col in columns])


async def write_csv(
    rows: AsyncIterable[Any],
    columns: Sequence[ColumnSpec],
    sink: BinaryIO,
) -> int:
    """Write CSV to a binary file-like sink as rows arrive.

    Returns:
        Number of data rows written (header excluded).

    Raises:
        SinkWriteError: The sink rejected a write. Output already written
            is left in place.
    """
    written = -1
    async for chunk in stream_csv(rows, columns):
        try:
            sink.write(chunk)
        except OSError as e:
            logger.error(f"CSV sink write failed after {max(written, 0)} rows: {e}")
            raise SinkWriteError(f"Could not write export output: {e}") from e
        written += 1
    return written
