"""
jwt_bearer_flow.observability.middleware

Access logging for the mock identity provider.

Responsibilities:
- Tag every request with a correlation id (caller-provided `x-request-id` or generated).
- Emit one `request_completed` event per request with status and latency.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from jwt_bearer_flow.observability.logging import get_logger

log = get_logger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        started = time.perf_counter()
        # Headers are never bound: the resource endpoints receive bearer tokens.
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        ):
            response: Response = await call_next(request)
            log.info(
                "request_completed",
                status=response.status_code,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        response.headers["x-request-id"] = request_id
        return response
