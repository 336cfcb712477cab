"""API middleware package."""

from stationdesk.api.middleware.request_id import RequestIDMiddleware
from stationdesk.api.middleware.timing import RequestTimingMiddleware

__all__ = ["RequestIDMiddleware", "RequestTimingMiddleware"]
