"""Request ID middleware for correlating logs with responses.

The middleware reads ``X-Request-ID`` from the incoming request (or creates
a UUID v4 when it is missing or unusable), exposes it through a context
variable for log records and error responses, and echoes it back on the
response.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 128

REQUEST_ID_HEADER = "X-Request-ID"

# Empty string means "outside a request"
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def get_request_id() -> str:
    """Return the request ID of the current request, or ``""`` outside one."""
    return request_id_var.get()


def _sanitize_request_id(header_value: str | None) -> str:
    """Accept a client-supplied request ID or generate a fresh one.

    Parameters
    ----------
    header_value : str | None
        Raw ``X-Request-ID`` header value.

    Returns
    -------
    str
        The header value truncated to ``MAX_REQUEST_ID_LENGTH`` if it
        consists only of printable ASCII, otherwise a new UUID v4.
    """
    if not header_value:
        return str(uuid.uuid4())

    if not all(33 <= ord(c) <= 126 for c in header_value):
        logger.warning("Ignoring X-Request-ID with non-printable characters")
        return str(uuid.uuid4())

    return header_value[:MAX_REQUEST_ID_LENGTH]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagates ``X-Request-ID`` through the request lifecycle.

    Examples
    --------
    >>> app.add_middleware(RequestIdMiddleware)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _sanitize_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(request_id)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RequestIdFilter(logging.Filter):
    """Logging filter that sets ``record.request_id`` (``"-"`` outside requests).

    Lets formatters use ``%(request_id)s``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
