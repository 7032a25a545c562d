"""
Analyze route: contract structure analysis.

POST /api/v1/analyze       → single-contract analysis
POST /api/v1/analyze/batch → independent analysis of several named contracts
"""

from fastapi import APIRouter, Request

from contractviz.config import get_settings
from contractviz.middleware.error_handler import AppException
from contractviz.middleware.rate_limiter import ANALYZE_RATE_LIMIT, limiter
from contractviz.models.contract import AnalyzedContract
from contractviz.models.schemas import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    ErrorResponse,
)
from contractviz.services.contract_analyzer import analyze_batch, analyze_contract
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/analyze", tags=["analyze"])


@router.post(
    "",
    response_model=AnalyzedContract,
    responses={
        422: {"model": ErrorResponse, "description": "Unrecognised contract format"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Analyze a Solidity source or interface list",
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def analyze_single(request: Request, body: AnalyzeRequest) -> AnalyzedContract:
    """Return the structural model of one contract text."""
    logger.info("Analyze request  source length=%d", len(body.source))
    return analyze_contract(body.source)


@router.post(
    "/batch",
    response_model=BatchAnalyzeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Too many contracts"},
        422: {"model": ErrorResponse, "description": "Every contract failed"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Analyze several contracts independently",
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def analyze_many(request: Request, body: BatchAnalyzeRequest) -> BatchAnalyzeResponse:
    """Analyze each contract on its own; failures are reported per contract."""
    limit = get_settings().MAX_BATCH_CONTRACTS
    if len(body.contracts) > limit:
        raise AppException(
            status_code=400,
            error_code="TOO_MANY_CONTRACTS",
            message=f"A batch may contain at most {limit} contracts.",
            details={"received": len(body.contracts), "limit": limit},
        )

    logger.info("Batch analyze request  contracts=%d", len(body.contracts))
    result = analyze_batch((c.name, c.source) for c in body.contracts)
    return BatchAnalyzeResponse(
        contracts=list(result.contracts),
        errors=list(result.errors),
        error=result.combined_error,
    )
