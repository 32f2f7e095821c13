"""Distinct-location indexing for matrix-based routing problems."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

from ...errors import LocationNotFoundError
from ...models.domain import Coordinate
from ...schemas.routing import VroomProblem


class CoordinateRegistry:
    """Assigns matrix indices to coordinates in first-seen order.

    Coordinates are compared by exact value; no snapping or tolerance is applied.
    """

    def __init__(self) -> None:
        self._locations: List[Coordinate] = []
        self._index: Dict[Coordinate, int] = {}

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._locations)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._index

    @property
    def locations(self) -> List[Coordinate]:
        return list(self._locations)

    def register(self, coordinate: Coordinate) -> int:
        """Return the index of *coordinate*, assigning the next one if unseen."""
        index = self._index.get(coordinate)
        if index is None:
            index = len(self._locations)
            self._locations.append(coordinate)
            self._index[coordinate] = index
        return index

    def register_lng_lat(self, pair: Optional[Sequence[float]]) -> Optional[int]:
        if pair is None:
            return None
        return self.register(Coordinate.from_lng_lat(pair))

    def index_of(self, coordinate: Coordinate) -> int:
        try:
            return self._index[coordinate]
        except KeyError:
            raise LocationNotFoundError(coordinate) from None

    def index_of_lng_lat(self, pair: Sequence[float]) -> int:
        return self.index_of(Coordinate.from_lng_lat(pair))

    @classmethod
    def from_problem(cls, problem: VroomProblem) -> "CoordinateRegistry":
        """Scan jobs, shipment pickups/deliveries, then vehicle start/end points."""
        registry = cls()
        for job in problem.jobs:
            registry.register_lng_lat(job.location)
        for shipment in problem.shipments or []:
            if shipment.pickup is not None:
                registry.register_lng_lat(shipment.pickup.location)
            if shipment.delivery is not None:
                registry.register_lng_lat(shipment.delivery.location)
        for vehicle in problem.vehicles:
            registry.register_lng_lat(vehicle.start)
            registry.register_lng_lat(vehicle.end)
        return registry

