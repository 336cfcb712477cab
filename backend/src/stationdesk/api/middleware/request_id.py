"""Correlation IDs for API requests.

Every log line written while a request is handled carries its ID, so a
CSV export or recording delete can be traced from access log to error.
"""

import re
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines; anything outside this is replaced.
_VALID_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_request_id(value: Optional[str]) -> str:
    """The caller's ID if it is safe to log, otherwise a fresh one."""
    if value and _VALID_ID.fullmatch(value):
        return value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds a request ID into the loguru context and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))

        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
