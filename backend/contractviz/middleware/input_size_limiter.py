"""
Input size limiting middleware.

Rejects requests whose Content-Length exceeds MAX_INPUT_SIZE_BYTES with
HTTP 413 before the body is read, which also bounds the text handed to the
regex-based extractor.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from contractviz.config import get_settings
from contractviz.utils.logger import get_logger

logger = get_logger("contractviz.size_limit")


class InputSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Content-Length exceeds *max_bytes*."""

    def __init__(self, app: ASGIApp, max_bytes: int | None = None) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes if max_bytes is not None else get_settings().MAX_INPUT_SIZE_BYTES

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            length = int(request.headers.get("content-length", "0"))
        except ValueError:
            length = 0

        if length > self.max_bytes:
            logger.warning(
                "Payload too large: %d bytes (limit %d)  %s %s",
                length,
                self.max_bytes,
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "error": True,
                    "error_code": "PAYLOAD_TOO_LARGE",
                    "message": (
                        f"Request body ({length:,} bytes) exceeds the "
                        f"maximum allowed size ({self.max_bytes:,} bytes)."
                    ),
                    "details": {"limit": self.max_bytes},
                },
            )

        return await call_next(request)
