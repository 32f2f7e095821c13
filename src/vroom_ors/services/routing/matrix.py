"""All-pairs travel matrix construction on top of single directions legs."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, List, Sequence, TypeVar

from ...config import settings
from ...errors import LegUnresolved, UpstreamError
from ...models.domain import (
    DISTANCE_SCALE,
    SENTINEL_DISTANCE,
    SENTINEL_DURATION,
    Coordinate,
    MatrixEntry,
    TravelMatrix,
)
from ...schemas.routing import DirectionsOptions
from .ors_client import ORSClient, Sleep

T = TypeVar("T")

logger = logging.getLogger(__name__)


class PacedTaskPool:
    """Runs coroutine factories at most ``size`` at a time.

    Work is dispatched in windows of ``size``; a window must finish entirely
    before the next starts, and ``pause_seconds`` separates consecutive windows.
    """

    def __init__(self, size: int, pause_seconds: float = 0.0, sleep: Sleep | None = None) -> None:
        if size < 1:
            raise ValueError("Pool size must be at least 1.")
        self.size = size
        self.pause_seconds = pause_seconds
        self._sleep = sleep or asyncio.sleep

    async def run(self, factories: Sequence[Callable[[], Awaitable[T]]]) -> List[T]:
        results: List[T] = []
        for start in range(0, len(factories), self.size):
            window = factories[start : start + self.size]
            results.extend(await asyncio.gather(*(factory() for factory in window)))
            if start + self.size < len(factories) and self.pause_seconds > 0:
                await self._sleep(self.pause_seconds)
        return results


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def normalize_duration(value: float | None) -> int:
    """Seconds rounded to the nearest integer; missing or non-finite becomes the sentinel."""
    if not _is_number(value):
        return SENTINEL_DURATION
    return _round_half_up(value)


def normalize_distance(value: float | None) -> int:
    """Upstream distance scaled by DISTANCE_SCALE and rounded; missing becomes the scaled sentinel."""
    if not _is_number(value):
        return SENTINEL_DISTANCE * DISTANCE_SCALE
    return _round_half_up(value * DISTANCE_SCALE)


def assemble_matrix(entries: Sequence[MatrixEntry], size: int) -> TravelMatrix:
    """Merge entries into dense tables. Order of *entries* is irrelevant.

    Cells no entry covers keep the sentinel so the result is always fully finite.
    """
    durations = [[0 if i == j else SENTINEL_DURATION for j in range(size)] for i in range(size)]
    distances = [
        [0 if i == j else SENTINEL_DISTANCE * DISTANCE_SCALE for j in range(size)] for i in range(size)
    ]
    geometries = {}

    for entry in entries:
        if entry.is_diagonal:
            continue
        durations[entry.from_index][entry.to_index] = normalize_duration(entry.duration)
        distances[entry.from_index][entry.to_index] = normalize_distance(entry.distance)
        if entry.geometry:
            geometries[(entry.from_index, entry.to_index)] = entry.geometry

    return TravelMatrix(durations=durations, distances=distances, geometries=geometries)


class MatrixBuilder:
    """Builds an N x N TravelMatrix with one directions request per off-diagonal leg."""

    def __init__(
        self,
        gateway: ORSClient,
        max_concurrency: int | None = None,
        batch_pause_seconds: float | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.gateway = gateway
        self.pool = PacedTaskPool(
            size=max_concurrency if max_concurrency is not None else settings.matrix_max_concurrency,
            pause_seconds=(
                batch_pause_seconds if batch_pause_seconds is not None else settings.matrix_batch_pause_seconds
            ),
            sleep=sleep,
        )

    async def _resolve_leg(
        self,
        locations: Sequence[Coordinate],
        from_index: int,
        to_index: int,
        options: DirectionsOptions,
        unresolved: List[LegUnresolved],
    ) -> MatrixEntry:
        try:
            return await self.gateway.fetch_leg(
                locations[from_index], locations[to_index], from_index, to_index, options
            )
        except UpstreamError as exc:
            failure = LegUnresolved(from_index, to_index, exc)
            logger.warning(str(failure))
        except Exception as exc:
            failure = LegUnresolved(from_index, to_index, exc)
            logger.exception(f"Unexpected error resolving leg {from_index} -> {to_index}: {exc}")
        unresolved.append(failure)
        return MatrixEntry.sentinel(from_index, to_index)

    async def build(
        self, locations: Sequence[Coordinate], options: DirectionsOptions | None = None
    ) -> TravelMatrix:
        options = options or DirectionsOptions()
        size = len(locations)
        entries: List[MatrixEntry] = [MatrixEntry.zero(index) for index in range(size)]
        unresolved: List[LegUnresolved] = []

        def leg_task(from_index: int, to_index: int) -> Callable[[], Awaitable[MatrixEntry]]:
            return lambda: self._resolve_leg(locations, from_index, to_index, options, unresolved)

        tasks = [leg_task(i, j) for i in range(size) for j in range(size) if i != j]

        start_time = time.time()
        logger.info(
            f"Building {size}x{size} matrix: {len(tasks)} directions requests "
            f"(max {self.pool.size} concurrent, {self.pool.pause_seconds:.2f}s between batches)"
        )
        async with self.gateway.session():
            entries.extend(await self.pool.run(tasks))

        matrix = assemble_matrix(entries, size)
        matrix.unresolved = sorted((failure.from_index, failure.to_index) for failure in unresolved)

        elapsed = time.time() - start_time
        if unresolved:
            logger.warning(
                f"Partial failure: {len(unresolved)}/{len(tasks)} legs unresolved and filled with "
                f"sentinel values. Elapsed time: {elapsed:.2f}s"
            )
        else:
            logger.info(f"Completed matrix: {len(tasks)} legs in {elapsed:.2f}s")
        return matrix
