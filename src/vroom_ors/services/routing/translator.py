"""Rewrites coordinate-based solver problems into matrix-index form."""

from __future__ import annotations

from typing import Optional

from ...errors import MissingLocationError
from ...models.domain import TravelMatrix
from ...schemas.routing import Job, Shipment, ShipmentStep, Vehicle, VroomProblem
from .registry import CoordinateRegistry


def require_job_locations(problem: VroomProblem) -> None:
    """Matrix-based solving needs every job positioned; raise for the first that is not."""
    for job in problem.jobs:
        if job.location is None:
            raise MissingLocationError(job.id)


def _translate_job(job: Job, registry: CoordinateRegistry) -> Job:
    return job.model_copy(
        update={"location": None, "location_index": registry.index_of_lng_lat(job.location)}
    )


def _translate_step(step: Optional[ShipmentStep], registry: CoordinateRegistry) -> Optional[ShipmentStep]:
    if step is None or step.location is None:
        return step
    return step.model_copy(
        update={"location": None, "location_index": registry.index_of_lng_lat(step.location)}
    )


def _translate_shipment(shipment: Shipment, registry: CoordinateRegistry) -> Shipment:
    return shipment.model_copy(
        update={
            "pickup": _translate_step(shipment.pickup, registry),
            "delivery": _translate_step(shipment.delivery, registry),
        }
    )


def _translate_vehicle(vehicle: Vehicle, registry: CoordinateRegistry, profile: str) -> Vehicle:
    update = {"profile": vehicle.profile or profile, "start": None, "end": None}
    if vehicle.start is not None:
        update["start_index"] = registry.index_of_lng_lat(vehicle.start)
    if vehicle.end is not None:
        update["end_index"] = registry.index_of_lng_lat(vehicle.end)
    return vehicle.model_copy(update=update)


def translate_problem(
    problem: VroomProblem,
    registry: CoordinateRegistry,
    matrix: TravelMatrix,
    profile: str,
) -> VroomProblem:
    """Return a copy of *problem* referencing locations by index only.

    The matrix is attached under ``matrices[profile]`` and every vehicle gets an
    explicit profile. Raises MissingLocationError before anything is returned
    if a job has no location.
    """
    require_job_locations(problem)
    jobs = [_translate_job(job, registry) for job in problem.jobs]
    shipments = (
        [_translate_shipment(shipment, registry) for shipment in problem.shipments]
        if problem.shipments is not None
        else None
    )
    vehicles = [_translate_vehicle(vehicle, registry, profile) for vehicle in problem.vehicles]

    return problem.model_copy(
        update={
            "jobs": jobs,
            "shipments": shipments,
            "vehicles": vehicles,
            "matrices": {profile: matrix.to_payload()},
        }
    )
