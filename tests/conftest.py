"""Shared fixtures: fake ORS and VROOM servers behind httpx.MockTransport."""

import json
import os

import httpx
import pytest

os.environ.setdefault("ENVIRONMENT", "test")

from vroom_ors.services.routing.ors_client import ORSClient
from vroom_ors.services.routing.polyline import encode_polyline
from vroom_ors.services.routing.vroom_client import VroomClient

ORS_URL = "http://ors.test"
VROOM_URL = "http://vroom.test"

DEPOT = [13.38, 52.51]
JOB_A = [13.39, 52.52]
JOB_B = [13.40, 52.50]


def straight_line_route(request: httpx.Request) -> httpx.Response:
    """ORS-shaped response whose geometry is the straight segment between the two points."""
    body = json.loads(request.content)
    (lng1, lat1), (lng2, lat2) = body["coordinates"]
    span = abs(lat2 - lat1) + abs(lng2 - lng1)
    return httpx.Response(
        200,
        json={
            "routes": [
                {
                    "summary": {"duration": span * 10000, "distance": span * 100},
                    "geometry": encode_polyline([(lat1, lng1), (lat2, lng2)]),
                }
            ]
        },
    )


def vroom_single_route(request: httpx.Request) -> httpx.Response:
    """Solution visiting every job in input order with the first vehicle."""
    problem = json.loads(request.content)
    vehicle = problem["vehicles"][0]
    steps = [{"type": "start", "location_index": vehicle["start_index"]}]
    steps += [{"type": "job", "id": job["id"], "location_index": job["location_index"]} for job in problem["jobs"]]
    if "end_index" in vehicle:
        steps.append({"type": "end", "location_index": vehicle["end_index"]})
    return httpx.Response(
        200,
        json={
            "code": 0,
            "summary": {"cost": 42, "routes": 1, "unassigned": 0},
            "unassigned": [],
            "routes": [{"vehicle": vehicle["id"], "cost": 42, "steps": steps}],
        },
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds):
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def ors_requests():
    return []


@pytest.fixture
def make_ors_client(fake_sleep, ors_requests):
    def _factory(handler=straight_line_route, **kwargs) -> ORSClient:
        def _recording(request):
            ors_requests.append(request)
            return handler(request)

        kwargs.setdefault("max_retries", 3)
        kwargs.setdefault("backoff_seconds", 2.0)
        return ORSClient(
            base_url=ORS_URL,
            api_key="test-key",
            default_profile="driving-car",
            transport=httpx.MockTransport(_recording),
            sleep=fake_sleep,
            **kwargs,
        )

    return _factory


@pytest.fixture
def vroom_requests():
    return []


@pytest.fixture
def make_vroom_client(vroom_requests):
    def _factory(handler=vroom_single_route) -> VroomClient:
        def _recording(request):
            vroom_requests.append(json.loads(request.content))
            return handler(request)

        return VroomClient(endpoint=VROOM_URL, transport=httpx.MockTransport(_recording))

    return _factory


@pytest.fixture
def sample_problem() -> dict:
    return {
        "jobs": [
            {"id": 1, "location": JOB_A, "service": 300},
            {"id": 2, "location": JOB_B},
        ],
        "vehicles": [{"id": 1, "start": DEPOT, "end": DEPOT}],
    }
