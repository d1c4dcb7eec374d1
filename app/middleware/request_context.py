"""
RequestContext Middleware - Adds request tracking to all requests.

Every request gets a request_id which is:
- stored on request.state.request_id
- bound into structlog contextvars, so every log line emitted while handling
  the request carries it
- echoed back in the X-Request-ID response header
"""

import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Add a request id to request.state, the log context and the response headers."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        logger.debug("Request started")

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
