"""Request ID middleware — unique ID per request for tracing.

Learn: Every request gets a UUID, either from the incoming
X-Request-ID header (for distributed tracing) or auto-generated.
The ID is bound to structlog's contextvars so it appears in every
log entry for that request — including the auth.* events raised
deep in the service layer — and returned in the response header.

An incoming ID is only trusted if it is short and made of token
characters; anything else (oversized, whitespace, control bytes that
would forge log lines) is replaced with a fresh UUID.
"""

import re
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:\-]+")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Return the caller's request ID if acceptable, else a new UUID."""
    if (
        incoming
        and len(incoming) <= MAX_REQUEST_ID_LENGTH
        and _REQUEST_ID_RE.fullmatch(incoming)
    ):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate or accept a request ID and bind it for the request's logs."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
