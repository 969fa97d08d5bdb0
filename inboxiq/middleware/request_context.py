"""
RequestContext Middleware - Adds request tracking to all requests.

Every request gets a ``request_id`` that is:
- stored on ``request.state.request_id``
- bound into structlog contextvars, so every log line emitted while the
  request is handled (router, pipeline, repositories) carries it
- echoed back in the ``X-Request-ID`` response header

An incoming ``X-Request-ID`` header is reused so traces can span services.
"""

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a per-request id into the logging context."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        clear_contextvars()
        bind_contextvars(request_id=request_id)

        logger.debug("Request started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        finally:
            clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
