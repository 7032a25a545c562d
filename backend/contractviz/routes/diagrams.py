"""
Diagram routes.

POST /api/v1/diagrams/function → sub-flow of the function behind a flow-graph node
POST /api/v1/diagrams/{mode}   → flow | class | state graph of a contract
"""

from fastapi import APIRouter, Request

from contractviz.middleware.rate_limiter import ANALYZE_RATE_LIMIT, limiter
from contractviz.models.diagram import Diagram, DiagramMode
from contractviz.models.schemas import (
    DiagramRequest,
    ErrorResponse,
    FunctionFlowRequest,
    FunctionFlowResponse,
)
from contractviz.services.contract_analyzer import analyze_contract
from contractviz.services.diagram_builder import (
    build_diagram,
    build_function_graph,
    resolve_function_node,
)
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/diagrams", tags=["diagrams"])


@router.post(
    "/function",
    response_model=FunctionFlowResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Node id does not name a function"},
        422: {"model": ErrorResponse, "description": "Unrecognised contract format"},
    },
    summary="Build the sub-flow of a selected function",
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def function_flow(request: Request, body: FunctionFlowRequest) -> FunctionFlowResponse:
    """Resolve ``function-<i>`` against the analysed contract and draw its sub-flow."""
    contract = analyze_contract(body.source)
    func = resolve_function_node(contract, body.node_id)
    logger.info("Function sub-flow  %s -> %s", body.node_id, func.name)
    return FunctionFlowResponse(function=func, diagram=build_function_graph(func))


@router.post(
    "/{mode}",
    response_model=Diagram,
    responses={
        422: {"model": ErrorResponse, "description": "Unrecognised contract format"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Build a flow, class or state diagram",
)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def contract_diagram(
    request: Request,
    mode: DiagramMode,
    body: DiagramRequest,
) -> Diagram:
    """Analyse the contract and return the graph for *mode*."""
    contract = analyze_contract(body.source)
    diagram = build_diagram(contract, mode)
    logger.info(
        "Built %s diagram for %s",
        mode,
        contract.name,
        extra={"nodes": len(diagram.nodes), "edges": len(diagram.edges)},
    )
    return diagram
