from vroom_ors.models.domain import TravelMatrix
from vroom_ors.schemas.routing import RouteStep, Solution
from vroom_ors.services.routing.polyline import decode_polyline, encode_polyline
from vroom_ors.services.routing.stitcher import (
    attach_route_geometries,
    collect_leg_geometries,
    stitch_route_geometry,
)

FIRST = encode_polyline([(0.0, 0.0), (1.0, 1.0)])
SECOND = encode_polyline([(1.0, 1.0), (2.0, 2.0)])
BROKEN = "_p~iF"


def _steps(*indices) -> list[RouteStep]:
    return [RouteStep(type="job", location_index=index) for index in indices]


def _matrix(geometries) -> TravelMatrix:
    return TravelMatrix(durations=[], distances=[], geometries=geometries)


def test_adjacent_segments_share_their_junction_point():
    geometry = stitch_route_geometry(_steps(0, 1, 2), {(0, 1): FIRST, (1, 2): SECOND})

    assert decode_polyline(geometry) == [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]


def test_steps_without_index_are_skipped():
    steps = _steps(0, 1) + [RouteStep(type="break")] + _steps(1, 2)

    assert collect_leg_geometries(steps, {(0, 1): FIRST, (1, 2): SECOND}) == [FIRST, SECOND]


def test_route_without_known_geometry_gets_none():
    assert stitch_route_geometry(_steps(0, 1, 0), {}) is None


def test_falls_back_to_first_valid_segment():
    assert stitch_route_geometry(_steps(0, 1, 2), {(0, 1): FIRST, (1, 2): BROKEN}) == FIRST
    assert stitch_route_geometry(_steps(0, 1, 2), {(0, 1): BROKEN, (1, 2): SECOND}) == SECOND


def test_attach_only_touches_routes_with_geometry():
    solution = Solution.model_validate(
        {
            "code": 0,
            "routes": [
                {"vehicle": 1, "steps": [{"type": "start", "location_index": 0}, {"type": "end", "location_index": 1}]},
                {"vehicle": 2, "steps": [{"type": "start", "location_index": 2}]},
                {"vehicle": 3, "steps": [{"type": "start", "location_index": 2}, {"type": "end", "location_index": 0}]},
            ],
        }
    )

    attach_route_geometries(solution, _matrix({(0, 1): FIRST}))

    assert [route.geometry for route in solution.routes] == [FIRST, None, None]
