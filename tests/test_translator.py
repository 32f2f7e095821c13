import pytest

from vroom_ors.errors import LocationNotFoundError, MissingLocationError
from vroom_ors.models.domain import TravelMatrix
from vroom_ors.schemas.routing import VroomProblem
from vroom_ors.services.routing.registry import CoordinateRegistry
from vroom_ors.services.routing.translator import translate_problem


def _matrix(size: int) -> TravelMatrix:
    return TravelMatrix(
        durations=[[0 if i == j else 60 for j in range(size)] for i in range(size)],
        distances=[[0 if i == j else 1000 for j in range(size)] for i in range(size)],
    )


def _translate(raw: dict, profile: str = "driving-car") -> VroomProblem:
    problem = VroomProblem.model_validate(raw)
    registry = CoordinateRegistry.from_problem(problem)
    return translate_problem(problem, registry, _matrix(len(registry)), profile)


def test_locations_are_replaced_by_indices(sample_problem):
    translated = _translate(sample_problem)

    assert [job.location_index for job in translated.jobs] == [0, 1]
    assert all(job.location is None for job in translated.jobs)
    vehicle = translated.vehicles[0]
    assert (vehicle.start_index, vehicle.end_index) == (2, 2)
    assert vehicle.start is None and vehicle.end is None


def test_payload_carries_matrix_under_profile(sample_problem):
    payload = _translate(sample_problem, profile="driving-hgv").to_payload()

    assert set(payload["matrices"]) == {"driving-hgv"}
    assert payload["matrices"]["driving-hgv"]["durations"][0] == [0, 60, 60]
    assert payload["matrices"]["driving-hgv"]["distances"][1] == [1000, 0, 1000]
    assert "location" not in payload["jobs"][0]
    assert "start" not in payload["vehicles"][0]
    assert payload["jobs"][0]["service"] == 300


def test_vehicle_profile_defaults_but_is_not_overridden():
    translated = _translate(
        {
            "jobs": [{"id": 1, "location": [1.0, 1.0]}],
            "vehicles": [{"id": 1, "start": [0.0, 0.0]}, {"id": 2, "profile": "car", "start": [0.0, 0.0]}],
        }
    )

    assert [vehicle.profile for vehicle in translated.vehicles] == ["driving-car", "car"]
    assert translated.vehicles[0].end_index is None


def test_shipment_steps_are_indexed():
    translated = _translate(
        {
            "shipments": [
                {"amount": [1], "pickup": {"id": 1, "location": [1.0, 1.0]}, "delivery": {"id": 1, "location": [2.0, 2.0]}},
                {"amount": [1], "pickup": {"id": 2, "location": [2.0, 2.0]}},
            ],
            "vehicles": [{"id": 1, "start": [1.0, 1.0]}],
        }
    )

    first, second = translated.shipments
    assert (first.pickup.location_index, first.delivery.location_index) == (0, 1)
    assert second.pickup.location_index == 1
    assert second.delivery is None
    assert translated.vehicles[0].start_index == 0
    assert translated.jobs == []


def test_unknown_fields_survive_translation():
    payload = _translate(
        {
            "jobs": [{"id": 1, "location": [1.0, 1.0], "custom_tag": "fragile"}],
            "vehicles": [{"id": 1, "start": [0.0, 0.0]}],
            "options": {"g": True},
        }
    ).to_payload()

    assert payload["jobs"][0]["custom_tag"] == "fragile"
    assert payload["options"] == {"g": True}


def test_job_without_location_is_rejected_by_id():
    problem = VroomProblem.model_validate(
        {"jobs": [{"id": 1, "location": [1.0, 1.0]}, {"id": 7}], "vehicles": [{"id": 1}]}
    )
    registry = CoordinateRegistry.from_problem(problem)

    with pytest.raises(MissingLocationError) as excinfo:
        translate_problem(problem, registry, _matrix(len(registry)), "driving-car")

    assert excinfo.value.entity_id == 7
    assert "Job 7" in str(excinfo.value)


def test_location_missing_from_registry_raises():
    problem = VroomProblem.model_validate(
        {"jobs": [{"id": 1, "location": [1.0, 1.0]}], "vehicles": [{"id": 1}]}
    )

    with pytest.raises(LocationNotFoundError):
        translate_problem(problem, CoordinateRegistry(), _matrix(0), "driving-car")
