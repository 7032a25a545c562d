"""
Request logging middleware.

Emits one access record per request with method and path in the message
and status, duration and client address as structured fields. The elapsed
time is also returned to the caller in ``X-Process-Time-Ms``. Contract
sources in request bodies are never logged.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from contractviz.utils.logger import get_logger

logger = get_logger("contractviz.request")

PROCESS_TIME_HEADER = "X-Process-Time-Ms"


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Times every request and records an access log entry for it."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s",
            request.method,
            request.url.path,
            extra={
                "status": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.1f}"
        return response
