"""Error taxonomy for StationDesk.

Every error carries the HTTP status code the API layer renders it with, so
kernel code can raise without knowing about FastAPI. The single exception
handler lives in ``stationdesk.api.main``.
"""

from typing import Optional


class StationDeskError(Exception):
    """Base class for all domain errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidDateRange(StationDeskError):
    """A date bound could not be parsed, or start is after end."""

    status_code = 400
    default_message = "Invalid date range."


class NotFound(StationDeskError):
    status_code = 404
    default_message = "Record not found!"


class PreconditionFailed(StationDeskError):
    """The resource exists but lacks what the operation needs."""

    status_code = 400
    default_message = "No recording available."


class SourceUnavailable(StationDeskError):
    """The backing data source or blob could not be read."""

    status_code = 503
    default_message = "Data source unavailable."


class SinkWriteError(StationDeskError):
    """Streamed output could not be written to its destination."""

    status_code = 500
    default_message = "Could not write export output."


class ExportTimeout(StationDeskError):
    """An export ran past its ``max_duration``."""

    status_code = 504
    default_message = "Export exceeded the maximum allowed duration."
