"""Builds one continuous route geometry from per-leg matrix geometries."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ...errors import GeometryStitchFailure
from ...models.domain import EdgeKey, TravelMatrix
from ...schemas.routing import RouteStep, Solution
from .polyline import decode_polyline, encode_polyline

logger = logging.getLogger(__name__)


def collect_leg_geometries(
    steps: Sequence[RouteStep], geometries: Mapping[EdgeKey, str]
) -> list[str]:
    """Geometries of consecutive step pairs, in route order.

    Pairs missing a location index on either side, or without a recorded
    geometry, are skipped.
    """
    segments = []
    for current, following in zip(steps, steps[1:]):
        if current.location_index is None or following.location_index is None:
            continue
        geometry = geometries.get((current.location_index, following.location_index))
        if geometry:
            segments.append(geometry)
    return segments


def combine_polylines(segments: Sequence[str]) -> str:
    """Concatenate encoded segments, dropping each shared junction point once.

    Raises:
        GeometryStitchFailure: If any segment cannot be decoded or the result re-encoded.
    """
    combined: list[tuple[float, ...]] = []
    try:
        for position, segment in enumerate(segments):
            points = decode_polyline(segment)
            combined.extend(points if position == 0 else points[1:])
        return encode_polyline(combined)
    except ValueError as exc:
        raise GeometryStitchFailure(f"Failed to combine {len(segments)} polylines: {exc}") from exc


def _first_decodable(segments: Sequence[str]) -> Optional[str]:
    for segment in segments:
        try:
            decode_polyline(segment)
        except ValueError:
            continue
        return segment
    return None


def stitch_route_geometry(
    steps: Sequence[RouteStep], geometries: Mapping[EdgeKey, str]
) -> Optional[str]:
    """Encoded geometry for a whole route, or None when no leg geometry is known.

    If combining fails, the first leg geometry that decodes on its own is returned instead.
    """
    segments = collect_leg_geometries(steps, geometries)
    if not segments:
        return None
    logger.info(f"Combining {len(segments)} geometry segments for route")
    try:
        return combine_polylines(segments)
    except GeometryStitchFailure as exc:
        logger.warning(f"{exc}. Falling back to first valid segment.")
        return _first_decodable(segments)


def attach_route_geometries(solution: Solution, matrix: TravelMatrix) -> Solution:
    """Fill ``geometry`` on every route of *solution* that has at least two steps."""
    for route in solution.routes:
        if len(route.steps) < 2:
            continue
        geometry = stitch_route_geometry(route.steps, matrix.geometries)
        if geometry is not None:
            route.geometry = geometry
    return solution

