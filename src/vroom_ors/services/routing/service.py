"""Routing orchestration service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from ...config import settings
from ...errors import ProblemValidationError
from ...models.domain import Coordinate, TravelMatrix
from ...schemas.routing import DirectionsOptions, Solution, VroomProblem
from .matrix import MatrixBuilder
from .ors_client import ORSClient
from .registry import CoordinateRegistry
from .stitcher import attach_route_geometries
from .translator import require_job_locations, translate_problem
from .vroom_client import VroomClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SolveResult:
    solution: Solution
    matrix: TravelMatrix
    profile: str
    location_count: int

    def metadata(self, problem: VroomProblem) -> dict:
        return {
            "vehicles": len(problem.vehicles),
            "jobs": len(problem.jobs),
            "shipments": len(problem.shipments or []),
            "locations": self.location_count,
            "profile": self.profile,
            "unresolved_legs": len(self.matrix.unresolved),
            "solved_at": datetime.now(timezone.utc).isoformat(),
        }


def validate_problem(problem: VroomProblem | None) -> VroomProblem:
    if problem is None:
        raise ProblemValidationError(
            'Request body must contain a "problem" field with VROOM problem definition'
        )
    if not problem.vehicles:
        raise ProblemValidationError("Problem must contain at least one vehicle")
    return problem


class RoutingEngine:
    """Coordinates matrix construction, solving and geometry reconstruction.

    Each call owns its own registry and matrix; nothing is shared between calls.
    """

    def __init__(
        self,
        gateway: ORSClient | None = None,
        solver: VroomClient | None = None,
        builder: MatrixBuilder | None = None,
        default_profile: str | None = None,
    ) -> None:
        self.gateway = gateway or ORSClient()
        self.solver = solver or VroomClient()
        self.builder = builder or MatrixBuilder(self.gateway)
        self.default_profile = default_profile or settings.default_profile

    def _profile(self, options: DirectionsOptions) -> str:
        return options.profile or self.default_profile

    async def get_matrix(
        self, locations: Sequence[Coordinate], options: DirectionsOptions | None = None
    ) -> TravelMatrix:
        options = options or DirectionsOptions()
        if not locations:
            raise ProblemValidationError(
                'Request body must contain a "locations" array with coordinate pairs'
            )
        logger.info(f"Creating matrix for {len(locations)} locations")
        return await self.builder.build(locations, options)

    async def solve(self, problem: VroomProblem, options: DirectionsOptions | None = None) -> SolveResult:
        problem = validate_problem(problem)
        options = options or DirectionsOptions()
        profile = self._profile(options)
        logger.info(
            f"Solving VROOM problem with {len(problem.vehicles)} vehicles, {len(problem.jobs)} jobs, "
            f"{len(problem.shipments or [])} shipments"
        )

        registry = CoordinateRegistry.from_problem(problem)
        # Fail on job locations before spending any directions requests.
        require_job_locations(problem)

        matrix = await self.builder.build(registry.locations, options.model_copy(update={"profile": profile}))
        translated = translate_problem(problem, registry, matrix, profile)
        solution = await self.solver.solve(translated)
        attach_route_geometries(solution, matrix)

        return SolveResult(
            solution=solution,
            matrix=matrix,
            profile=profile,
            location_count=len(registry),
        )
