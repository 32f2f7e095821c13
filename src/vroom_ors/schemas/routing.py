"""Routing problem, solution and request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Profile = Literal[
    "driving-car",
    "driving-hgv",
    "cycling-regular",
    "cycling-road",
    "cycling-mountain",
    "cycling-electric",
    "foot-walking",
    "foot-hiking",
    "wheelchair",
    "public-transport",
]


def _check_lng_lat(value: Optional[List[float]]) -> Optional[List[float]]:
    if value is not None and len(value) != 2:
        raise ValueError("location must be a [longitude, latitude] pair")
    return value


class RouteOptions(BaseModel):
    """Avoidances and vehicle restrictions forwarded to the directions service."""

    model_config = ConfigDict(extra="allow")

    avoid_features: Optional[List[str]] = None
    avoid_borders: Optional[Literal["all", "controlled", "none"]] = None
    avoid_countries: Optional[List[str]] = None
    vehicle_type: Optional[
        Literal["hgv", "bus", "agricultural", "delivery", "forestry", "goods", "unknown"]
    ] = None


class DirectionsOptions(BaseModel):
    profile: Optional[Profile] = Field(
        default=None, description="Travel mode; also the key the matrix is attached under."
    )
    preference: Optional[Literal["fastest", "shortest", "recommended", "custom"]] = None
    units: Literal["km", "mi", "m"] = "km"
    instructions: bool = False
    elevation: bool = False
    extra_info: List[str] = Field(default_factory=list)
    maximum_speed: Optional[float] = Field(default=None, gt=0)
    options: Optional[RouteOptions] = None


# ---------------------------------------------------------------------------
# Solver problem
# ---------------------------------------------------------------------------


class Job(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    description: Optional[str] = None
    location: Optional[List[float]] = Field(default=None, description="[longitude, latitude]")
    location_index: Optional[int] = Field(default=None, ge=0)
    setup: Optional[int] = None
    service: Optional[int] = None
    delivery: Optional[List[int]] = None
    pickup: Optional[List[int]] = None
    skills: Optional[List[int]] = None
    priority: Optional[int] = Field(default=None, ge=0, le=100)
    time_windows: Optional[List[List[int]]] = None

    @field_validator("location")
    @classmethod
    def _check_location(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        return _check_lng_lat(value)


class ShipmentStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    description: Optional[str] = None
    location: Optional[List[float]] = None
    location_index: Optional[int] = Field(default=None, ge=0)
    setup: Optional[int] = None
    service: Optional[int] = None
    time_windows: Optional[List[List[int]]] = None

    @field_validator("location")
    @classmethod
    def _check_location(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        return _check_lng_lat(value)


class Shipment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    pickup: Optional[ShipmentStep] = None
    delivery: Optional[ShipmentStep] = None
    amount: Optional[List[int]] = None
    skills: Optional[List[int]] = None
    priority: Optional[int] = Field(default=None, ge=0, le=100)


class Vehicle(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    profile: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    start: Optional[List[float]] = None
    end: Optional[List[float]] = None
    start_index: Optional[int] = Field(default=None, ge=0)
    end_index: Optional[int] = Field(default=None, ge=0)
    capacity: Optional[List[int]] = None
    skills: Optional[List[int]] = None
    time_window: Optional[List[int]] = None
    breaks: Optional[List[Dict[str, Any]]] = None
    costs: Optional[Dict[str, Any]] = None

    @field_validator("start", "end")
    @classmethod
    def _check_endpoints(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        return _check_lng_lat(value)


class VroomProblem(BaseModel):
    model_config = ConfigDict(extra="allow")

    jobs: List[Job] = Field(default_factory=list)
    shipments: Optional[List[Shipment]] = None
    vehicles: List[Vehicle] = Field(default_factory=list)
    options: Optional[Dict[str, Any]] = None
    matrices: Optional[Dict[str, Dict[str, List[List[int]]]]] = None

    @field_validator("jobs", mode="before")
    @classmethod
    def _default_jobs(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Solver solution
# ---------------------------------------------------------------------------


class RouteStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    location: Optional[List[float]] = None
    location_index: Optional[int] = None
    id: Optional[int] = None
    setup: Optional[int] = None
    service: Optional[int] = None
    waiting_time: Optional[int] = None
    arrival: Optional[int] = None
    duration: Optional[int] = None
    distance: Optional[int] = None


class Route(BaseModel):
    model_config = ConfigDict(extra="allow")

    vehicle: int
    cost: Optional[int] = None
    setup: Optional[int] = None
    service: Optional[int] = None
    duration: Optional[int] = None
    waiting_time: Optional[int] = None
    priority: Optional[int] = None
    distance: Optional[int] = None
    geometry: Optional[str] = Field(default=None, description="Encoded polyline for the whole route.")
    steps: List[RouteStep] = Field(default_factory=list)


class Solution(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int
    summary: Optional[Dict[str, Any]] = None
    unassigned: List[Dict[str, Any]] = Field(default_factory=list)
    routes: List[Route] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# HTTP request/response bodies
# ---------------------------------------------------------------------------


class SolveRequest(BaseModel):
    problem: Optional[VroomProblem] = None
    options: Optional[DirectionsOptions] = Field(
        default=None, validation_alias=AliasChoices("options", "orsOptions")
    )


class SolveResponse(BaseModel):
    success: bool = True
    solution: Solution
    metadata: dict


class MatrixRequest(BaseModel):
    locations: Optional[List[List[float]]] = Field(default=None, description="[longitude, latitude] pairs")
    options: Optional[DirectionsOptions] = Field(
        default=None, validation_alias=AliasChoices("options", "orsOptions")
    )


class MatrixModel(BaseModel):
    durations: List[List[int]]
    distances: List[List[int]]


class MatrixResponse(BaseModel):
    success: bool = True
    matrix: MatrixModel
    metadata: dict
