"""Request timing middleware.

Logs every request at debug level and slow ones as warnings. For streamed
responses (CSV exports, recording downloads) the measured time covers the
handler up to the first byte, not the whole transfer.
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from stationdesk.core.config import settings


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Measures request duration and sets the X-Process-Time header.

    Attributes:
        slow_request_threshold: Seconds above which a request is logged
            as slow.
    """

    def __init__(self, app, slow_request_threshold: Optional[float] = None):
        super().__init__(app)
        self.slow_request_threshold = (
            slow_request_threshold
            if slow_request_threshold is not None
            else settings.SLOW_REQUEST_THRESHOLD
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        duration_ms = round(duration * 1000, 2)

        if duration > self.slow_request_threshold:
            logger.warning(
                f"SLOW REQUEST: {request.method} {request.url.path} "
                f"took {duration_ms}ms (threshold: {self.slow_request_threshold * 1000}ms)"
            )
        else:
            logger.debug(
                f"{request.method} {request.url.path} - "
                f"{duration_ms}ms - {response.status_code}"
            )

        response.headers["X-Process-Time"] = str(duration)
        return response
