"""Domain models for coordinates and travel matrices."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

# Large but finite placeholders for legs the directions service could not resolve.
# The solver rejects non-finite numbers, so unreachable never becomes Infinity.
SENTINEL_DURATION = 999999  # seconds, about 11.5 days
SENTINEL_DISTANCE = 999999  # upstream distance units, before scaling
DISTANCE_SCALE = 1000  # km as reported by ORS -> meters as expected by VROOM

EdgeKey = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A (latitude, longitude) pair. Equality is exact on both components."""

    lat: float
    lng: float

    @classmethod
    def from_lng_lat(cls, pair: Sequence[float]) -> "Coordinate":
        """Build from the ``[longitude, latitude]`` order used by solver payloads."""
        if len(pair) < 2:
            raise ValueError(f"Expected [longitude, latitude], got {list(pair)!r}")
        return cls(lat=float(pair[1]), lng=float(pair[0]))

    def as_lng_lat(self) -> List[float]:
        return [self.lng, self.lat]

    def __str__(self) -> str:
        return f"[{self.lng}, {self.lat}]"


@dataclass(slots=True)
class MatrixEntry:
    """Result of one pairwise directions query."""

    from_index: int
    to_index: int
    duration: Optional[float]  # seconds
    distance: Optional[float]  # requested upstream units
    geometry: Optional[str] = None  # encoded polyline

    @property
    def is_diagonal(self) -> bool:
        return self.from_index == self.to_index

    @classmethod
    def zero(cls, index: int) -> "MatrixEntry":
        return cls(from_index=index, to_index=index, duration=0, distance=0)

    @classmethod
    def sentinel(cls, from_index: int, to_index: int) -> "MatrixEntry":
        return cls(
            from_index=from_index,
            to_index=to_index,
            duration=SENTINEL_DURATION,
            distance=SENTINEL_DISTANCE,
        )


@dataclass(slots=True)
class TravelMatrix:
    """Dense duration/distance tables plus the path geometry of every resolved leg."""

    durations: List[List[int]]
    distances: List[List[int]]
    geometries: Dict[EdgeKey, str] = field(default_factory=dict)
    unresolved: List[EdgeKey] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.durations)

    def geometry_for(self, from_index: int, to_index: int) -> Optional[str]:
        return self.geometries.get((from_index, to_index))

    def to_payload(self) -> Dict[str, List[List[int]]]:
        """Shape expected under ``matrices.<profile>`` in a solver request."""
        return {"durations": self.durations, "distances": self.distances}
