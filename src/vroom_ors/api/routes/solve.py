"""Solve endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.routing import SolveRequest, SolveResponse
from ...services.routing.service import RoutingEngine, validate_problem
from ..dependencies import get_routing_engine

router = APIRouter(tags=["solve"])


@router.post("/solve", response_model=SolveResponse, status_code=status.HTTP_200_OK)
async def solve(payload: SolveRequest, engine: RoutingEngine = Depends(get_routing_engine)) -> SolveResponse:
    problem = validate_problem(payload.problem)
    result = await engine.solve(problem, payload.options)
    return SolveResponse(solution=result.solution, metadata=result.metadata(problem))
