"""ASGI middleware that logs every request with its outcome and duration."""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        logger.info("http %s %s received", request.method, request.url.path)
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            "http %s %s -> %d in %.0f ms", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response
