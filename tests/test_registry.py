import pytest

from vroom_ors.errors import LocationNotFoundError
from vroom_ors.models.domain import Coordinate
from vroom_ors.schemas.routing import VroomProblem
from vroom_ors.services.routing.registry import CoordinateRegistry


def test_identical_locations_share_one_index():
    problem = VroomProblem.model_validate(
        {
            "jobs": [{"id": 1, "location": [20.0, 10.0]}, {"id": 2, "location": [20.0, 10.0]}],
            "vehicles": [{"id": 1, "start": [40.0, 30.0]}],
        }
    )

    registry = CoordinateRegistry.from_problem(problem)

    assert len(registry) == 2
    assert registry.index_of_lng_lat([20.0, 10.0]) == 0
    assert registry.index_of_lng_lat([40.0, 30.0]) == 1
    assert registry.locations == [Coordinate(lat=10.0, lng=20.0), Coordinate(lat=30.0, lng=40.0)]


def test_scan_order_is_jobs_then_shipments_then_vehicles():
    problem = VroomProblem.model_validate(
        {
            "jobs": [{"id": 1, "location": [1.0, 1.0]}],
            "shipments": [
                {"pickup": {"location": [2.0, 2.0]}, "delivery": {"location": [3.0, 3.0]}},
            ],
            "vehicles": [{"id": 1, "start": [4.0, 4.0], "end": [5.0, 5.0]}],
        }
    )

    registry = CoordinateRegistry.from_problem(problem)

    assert [coordinate.lng for coordinate in registry] == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_absent_locations_are_skipped():
    problem = VroomProblem.model_validate(
        {
            "jobs": [{"id": 1}],
            "shipments": [{"pickup": {"location": [2.0, 2.0]}}],
            "vehicles": [{"id": 1}],
        }
    )

    registry = CoordinateRegistry.from_problem(problem)

    assert len(registry) == 1
    assert Coordinate(lat=2.0, lng=2.0) in registry


def test_coordinates_differing_in_last_digit_are_distinct():
    registry = CoordinateRegistry()
    first = registry.register(Coordinate(lat=52.52, lng=13.405))
    second = registry.register(Coordinate(lat=52.52, lng=13.4050001))
    assert first != second


def test_unknown_coordinate_raises():
    registry = CoordinateRegistry()
    registry.register(Coordinate(lat=1.0, lng=1.0))
    with pytest.raises(LocationNotFoundError):
        registry.index_of(Coordinate(lat=2.0, lng=2.0))
