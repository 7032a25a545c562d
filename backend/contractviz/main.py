"""
FastAPI application entry point.

Creates the FastAPI app instance, registers middleware (CORS, rate limiting,
error handling, request logging, size limiting), mounts the analysis and
diagram routers, and defines the health-check endpoint.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from contractviz.config import get_settings
from contractviz.middleware.cors import setup_cors
from contractviz.middleware.error_handler import setup_error_handlers
from contractviz.middleware.input_size_limiter import InputSizeLimitMiddleware
from contractviz.middleware.rate_limiter import setup_rate_limiter
from contractviz.middleware.request_logger import RequestLoggerMiddleware
from contractviz.routes.analyze import router as analyze_router
from contractviz.routes.diagrams import router as diagrams_router
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: runs on startup and shutdown."""
    settings = get_settings()
    logger.info(
        "contractviz API started  env=%s  origins=%s  max_input=%d",
        settings.ENVIRONMENT,
        settings.allowed_origins_list,
        settings.MAX_INPUT_SIZE_BYTES,
    )
    yield
    logger.info("contractviz API shutting down")


app = FastAPI(
    title="contractviz API",
    version=API_VERSION,
    description="Smart-contract structure analysis and diagram generation API",
    lifespan=lifespan,
)

# ── Middleware ────────────────────────────────────────────────
setup_cors(app)
setup_error_handlers(app)
setup_rate_limiter(app)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(InputSizeLimitMiddleware)

# ── Routes ────────────────────────────────────────────────────
app.include_router(analyze_router, prefix="/api/v1")
app.include_router(diagrams_router, prefix="/api/v1")


# ── Health Check ──────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Return API health status."""
    return {"status": "ok", "version": API_VERSION}
