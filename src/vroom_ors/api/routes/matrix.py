"""Matrix-only endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from ...errors import ProblemValidationError
from ...models.domain import Coordinate
from ...schemas.routing import MatrixModel, MatrixRequest, MatrixResponse
from ...services.routing.service import RoutingEngine
from ..dependencies import get_routing_engine

router = APIRouter(tags=["matrix"])


@router.post("/matrix", response_model=MatrixResponse, status_code=status.HTTP_200_OK)
async def matrix(payload: MatrixRequest, engine: RoutingEngine = Depends(get_routing_engine)) -> MatrixResponse:
    if not payload.locations:
        raise ProblemValidationError('Request body must contain a "locations" array with coordinate pairs')
    try:
        locations = [Coordinate.from_lng_lat(pair) for pair in payload.locations]
    except ValueError as exc:
        raise ProblemValidationError(str(exc)) from exc

    travel_matrix = await engine.get_matrix(locations, payload.options)
    count = len(locations)
    return MatrixResponse(
        matrix=MatrixModel(**travel_matrix.to_payload()),
        metadata={
            "locations": count,
            "matrix_size": f"{count}x{count}",
            "unresolved_legs": len(travel_matrix.unresolved),
            "created_at": datetime.now(timezone.utc).isoformat(),
        },
    )
