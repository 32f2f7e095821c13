"""Google encoded polyline codec.

ORS returns route geometry in this format when ``geometry`` is requested as
JSON, and VROOM clients expect the combined route geometry in it as well.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

DEFAULT_PRECISION = 5
ELEVATION_PRECISION = 2


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _decode_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if index >= len(polyline):
            raise ValueError("Truncated polyline string.")
        b = ord(polyline[index]) - 63
        if b < 0 or b > 63:
            raise ValueError(f"Invalid polyline character {polyline[index]!r} at position {index}.")
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(
    polyline: str, precision: int = DEFAULT_PRECISION, elevation: bool = False
) -> list[tuple[float, ...]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    Args:
        polyline: Encoded polyline string
        precision: Number of decimal places encoded (5 for ORS/OSRM, 6 for polyline6)
        elevation: Each point carries a third height value (ORS with ``elevation=true``)

    Returns:
        List of (latitude, longitude) tuples, or (latitude, longitude, height)
        when *elevation* is set

    Raises:
        ValueError: If the string is truncated or contains characters outside the alphabet.
    """
    factor = 10**precision
    coordinates = []
    index = 0
    lat = 0
    lon = 0
    height = 0

    while index < len(polyline):
        dlat, index = _decode_value(polyline, index)
        lat += dlat
        dlon, index = _decode_value(polyline, index)
        lon += dlon
        if elevation:
            dheight, index = _decode_value(polyline, index)
            height += dheight
            coordinates.append((lat / factor, lon / factor, height / 10**ELEVATION_PRECISION))
        else:
            coordinates.append((lat / factor, lon / factor))

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coordinates: Iterable[Sequence[float]], precision: int = DEFAULT_PRECISION) -> str:
    """Encode (lat, lon) pairs as a Google polyline string.

    Only the first two components of each point are used, so points carrying
    elevation can be passed through unchanged.
    """
    factor = 10**precision
    output = []
    prev_lat = 0
    prev_lon = 0
    for point in coordinates:
        if len(point) < 2:
            raise ValueError(f"Expected (lat, lon) pair, got {point!r}.")
        lat = _round_half_away(float(point[0]) * factor)
        lon = _round_half_away(float(point[1]) * factor)
        output.append(_encode_value(lat - prev_lat))
        output.append(_encode_value(lon - prev_lon))
        prev_lat, prev_lon = lat, lon
    return "".join(output)
