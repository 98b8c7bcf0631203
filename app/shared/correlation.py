"""
Correlation IDs for request tracing.

Every request gets an ID, taken from X-Correlation-ID / X-Request-ID when the
client sends a usable one and generated otherwise. The ID is:
- stored on ``request.state.correlation_id`` (error bodies include it)
- echoed back in the X-Correlation-ID response header
- readable anywhere in the request via get_correlation_id() (log records,
  outbound calls to the generative endpoint and the PDF service)
"""

import contextvars
import re
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


_correlation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

CORRELATION_HEADERS = [
    "X-Correlation-ID",
    "X-Request-ID",
]

RESPONSE_HEADER = "X-Correlation-ID"

# Incoming IDs end up in log lines; anything else is replaced.
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current request, if any."""
    return _correlation_id_ctx.get()


def generate_correlation_id() -> str:
    """New 8-character correlation ID."""
    return uuid.uuid4().hex[:8]


def incoming_correlation_id(request: Request) -> Optional[str]:
    """First well-formed correlation header on the request."""
    for header in CORRELATION_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value and _VALID_ID.match(value):
            return value
    return None


class CorrelationContext:
    """
    Bind a correlation ID to the current context.

        with CorrelationContext(request_id) as cid:
            ...
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _correlation_id_ctx.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _correlation_id_ctx.reset(self._token)
            self._token = None


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to every request and response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with CorrelationContext(incoming_correlation_id(request)) as correlation_id:
            request.state.correlation_id = correlation_id
            response = await call_next(request)
        response.headers[RESPONSE_HEADER] = correlation_id
        return response


def propagate_correlation_headers(headers: Optional[dict] = None) -> dict:
    """Copy of ``headers`` with the current correlation ID added."""
    outgoing = dict(headers or {})
    correlation_id = get_correlation_id()
    if correlation_id:
        outgoing[RESPONSE_HEADER] = correlation_id
    return outgoing
