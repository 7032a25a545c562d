"""
Pydantic request/response models (schemas).

Defines the data transfer objects used by the API routes: AnalyzeRequest,
BatchAnalyzeRequest/Response, DiagramRequest, FunctionFlowRequest/Response
and the ErrorResponse envelope. Analysis results themselves are returned as
the domain models from ``contractviz.models``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from contractviz.models.contract import FunctionRecord, NamedAnalysis
from contractviz.models.diagram import Diagram

_MAX_SOURCE_LENGTH = 100_000


# ── Shared ────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    """Standardised error envelope."""
    error: bool = True
    error_code: str
    message: str
    details: dict | None = None


# ── Analyze ───────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    """POST /api/v1/analyze request body."""
    source: str = Field(
        ...,
        min_length=1,
        max_length=_MAX_SOURCE_LENGTH,
        description="Solidity source code, or a JSON interface list (ABI).",
    )


class ContractInput(BaseModel):
    """A single named contract text inside a batch request."""
    name: str = Field(default="", max_length=200)
    source: str = Field(default="", max_length=_MAX_SOURCE_LENGTH)


class BatchAnalyzeRequest(BaseModel):
    """POST /api/v1/analyze/batch request body."""
    contracts: list[ContractInput] = Field(
        ...,
        min_length=1,
        description="Contracts to analyze independently.",
    )


class BatchAnalyzeResponse(BaseModel):
    """POST /api/v1/analyze/batch response body."""
    contracts: list[NamedAnalysis] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    error: str | None = Field(
        default=None,
        description="Per-contract errors joined by newlines; null when every contract was analyzed.",
    )


# ── Diagrams ──────────────────────────────────────────────────

class DiagramRequest(BaseModel):
    """POST /api/v1/diagrams/{mode} request body."""
    source: str = Field(..., min_length=1, max_length=_MAX_SOURCE_LENGTH)


class FunctionFlowRequest(BaseModel):
    """POST /api/v1/diagrams/function request body."""
    source: str = Field(..., min_length=1, max_length=_MAX_SOURCE_LENGTH)
    node_id: str = Field(
        ...,
        pattern=r"^function-\d+$",
        description="Flow-graph node id of the selected function.",
    )


class FunctionFlowResponse(BaseModel):
    """POST /api/v1/diagrams/function response body."""
    function: FunctionRecord
    diagram: Diagram
