"""
Global error handler middleware.

Defines the AppException hierarchy raised by the analysis pipeline and
registers exception handlers on the FastAPI app for standardized JSON
error responses.
"""

from __future__ import annotations

import re
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

_SUMMARY_LENGTH = 80


class AppException(Exception):
    """Application-level exception that maps to a structured JSON response."""

    def __init__(
        self,
        status_code: int = 400,
        error_code: str = "BAD_REQUEST",
        message: str = "An error occurred.",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


def summarize_text(text: str, limit: int = _SUMMARY_LENGTH) -> str:
    """Collapse whitespace and truncate *text* for use in error messages."""
    collapsed = re.sub(r"\s+", " ", text).strip()
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 3] + "..."


class FormatError(AppException):
    """Input is neither an interface list nor recognisable contract source."""

    def __init__(self, reason: str, text: str = "") -> None:
        summary = summarize_text(text)
        super().__init__(
            status_code=422,
            error_code="INVALID_CONTRACT_FORMAT",
            message=f"Invalid contract format: {reason}",
            details={"reason": reason, "input_summary": summary},
        )
        self.reason = reason
        self.summary = summary


class NodeNotFoundError(AppException):
    """A diagram node id does not resolve to an entity of the model."""

    def __init__(self, node_id: str) -> None:
        super().__init__(
            status_code=404,
            error_code="NODE_NOT_FOUND",
            message=f"No function matches diagram node '{node_id}'.",
            details={"node_id": node_id},
        )
        self.node_id = node_id


class BatchAnalysisError(AppException):
    """Every contract of a batch failed, or the batch had nothing to analyze."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(
            status_code=422,
            error_code="BATCH_ANALYSIS_FAILED",
            message=message,
            details={"errors": errors or []},
        )
        self.errors = errors or []


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(_request: Request, exc: AppException) -> JSONResponse:
        logger.warning(
            "AppException %s: %s  details=%s",
            exc.error_code,
            exc.message,
            exc.details,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "error_code": exc.error_code,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception: %s\n%s", exc, traceback.format_exc())
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "error_code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
                "details": {},
            },
        )
