"""HTTP client for the openrouteservice directions API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence

import httpx

from ...config import settings
from ...errors import UpstreamError, UpstreamRateLimited, UpstreamRequestFailed, is_rate_limit
from ...models.domain import Coordinate, MatrixEntry
from ...schemas.routing import DirectionsOptions
from .polyline import decode_polyline, encode_polyline

SERVICE_NAME = "ORS"

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


def _coordinate_list_to_polyline(points: Sequence[Any]) -> str:
    # GeoJSON order is [lng, lat(, height)]
    latlngs = []
    for point in points:
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            raise ValueError(f"Unexpected geometry point {point!r}")
        latlngs.append((float(point[1]), float(point[0])))
    return encode_polyline(latlngs)


def normalize_geometry(raw: Any, elevation: bool = False) -> Optional[str]:
    """Reduce any geometry shape ORS may return to one 2D encoded polyline.

    Handles a bare encoded string, a coordinate list, a GeoJSON-like object with
    ``coordinates`` and an object holding the string under ``polyline``.
    Returns None when no geometry is present; malformed points raise
    ValueError or TypeError.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw:
            return None
        if elevation:
            return encode_polyline(decode_polyline(raw, elevation=True))
        return raw
    if isinstance(raw, (list, tuple)):
        return _coordinate_list_to_polyline(raw) if raw else None
    if isinstance(raw, dict):
        if raw.get("coordinates"):
            return _coordinate_list_to_polyline(raw["coordinates"])
        if isinstance(raw.get("polyline"), str):
            return normalize_geometry(raw["polyline"], elevation=elevation)
    return None


def build_directions_body(coordinates: Sequence[Coordinate], options: DirectionsOptions) -> dict:
    """Translate options to the ORS POST body. Geometry is always requested."""
    body: dict[str, Any] = {
        "coordinates": [coordinate.as_lng_lat() for coordinate in coordinates],
        "units": options.units,
        "geometry": True,
        "instructions": options.instructions,
        "elevation": options.elevation,
        "extra_info": list(options.extra_info),
        "options": options.options.model_dump(exclude_none=True) if options.options else {},
    }
    if options.preference:
        body["preference"] = options.preference
    if options.maximum_speed is not None:
        body["maximum_speed"] = options.maximum_speed
    return body


class ORSClient:
    """Fetches single directions legs with rate-limit aware retries.

    Only rate-limit failures (HTTP 429, or a rate-limit message when no status
    is known) are retried, waiting ``backoff_seconds * 2 ** attempt`` between
    attempts. Any other failure propagates on the first occurrence.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        default_profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.base_url = (base_url or settings.ors_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("ORS base URL is not configured.")
        self.api_key = api_key if api_key is not None else settings.ors_api_key
        self.default_profile = default_profile or settings.default_profile
        self.timeout = timeout if timeout is not None else settings.ors_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.ors_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.ors_backoff_seconds
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._session_client: ContextVar[httpx.AsyncClient | None] = ContextVar(
            f"ors_session_{id(self)}", default=None
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = self.api_key
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            headers=self._headers(),
            transport=self._transport,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Share one connection pool across every request made inside the block.

        The client is scoped to the calling task and the tasks it spawns, so
        concurrent builds on one ORSClient each open and close their own pool.
        """
        current = self._session_client.get()
        if current is not None:
            yield current
            return
        async with self._get_client() as client:
            token = self._session_client.set(client)
            try:
                yield client
            finally:
                self._session_client.reset(token)

    async def get_directions(
        self, coordinates: Sequence[Coordinate], options: DirectionsOptions | None = None
    ) -> dict:
        """Issue one directions request. Raises UpstreamRequestFailed on any failure."""
        options = options or DirectionsOptions()
        profile = options.profile or self.default_profile
        url = f"{self.base_url}/v2/directions/{profile}/json"
        body = build_directions_body(coordinates, options)

        async with self.session() as client:
            try:
                response = await client.post(url, json=body)
            except httpx.TimeoutException as exc:
                raise UpstreamRequestFailed(SERVICE_NAME, f"Request timed out after {self.timeout}s: {exc}") from exc
            except httpx.HTTPError as exc:
                raise UpstreamRequestFailed(
                    SERVICE_NAME, f"Failed to connect to ORS service at {self.base_url}: {exc}"
                ) from exc

        if response.is_error:
            raise UpstreamRequestFailed(SERVICE_NAME, response.text, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamRequestFailed(
                SERVICE_NAME, "Response body is not valid JSON.", status_code=response.status_code
            ) from exc

    async def get_directions_with_retry(
        self, coordinates: Sequence[Coordinate], options: DirectionsOptions | None = None
    ) -> dict:
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                return await self.get_directions(coordinates, options)
            except UpstreamError as error:
                if not is_rate_limit(error):
                    raise
                if attempt >= self.max_retries:
                    raise UpstreamRateLimited(
                        SERVICE_NAME, error.message, status_code=error.status_code, attempts=attempts
                    ) from error
                delay = self.backoff_seconds * (2**attempt)
                logger.warning(
                    f"Rate limit hit, retrying in {delay:.1f}s (attempt {attempt + 1}/{attempts})"
                )
                await self._sleep(delay)
        raise UpstreamRateLimited(SERVICE_NAME, "Max retries exceeded", attempts=attempts)

    async def fetch_leg(
        self,
        origin: Coordinate,
        destination: Coordinate,
        from_index: int,
        to_index: int,
        options: DirectionsOptions | None = None,
    ) -> MatrixEntry:
        """Resolve one directed leg into a MatrixEntry.

        A response without candidate routes becomes a sentinel entry; request
        failures propagate as UpstreamError subclasses.
        """
        if from_index == to_index:
            return MatrixEntry.zero(from_index)

        options = options or DirectionsOptions()
        data = await self.get_directions_with_retry([origin, destination], options)

        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes or not isinstance(routes, list):
            return MatrixEntry.sentinel(from_index, to_index)
        route = routes[0]
        if not isinstance(route, dict):
            raise UpstreamRequestFailed(SERVICE_NAME, f"Malformed route object for leg {from_index} -> {to_index}")

        summary = route.get("summary")
        if not isinstance(summary, dict):
            summary = {}
        raw_geometry = route.get("geometry")
        logger.debug(
            f"Route structure for {from_index} -> {to_index}: geometry type {type(raw_geometry).__name__}"
        )
        try:
            geometry = normalize_geometry(raw_geometry, elevation=options.elevation)
        except (TypeError, ValueError) as exc:
            logger.warning(f"Discarding unreadable geometry for leg {from_index} -> {to_index}: {exc}")
            geometry = None

        return MatrixEntry(
            from_index=from_index,
            to_index=to_index,
            duration=summary.get("duration"),
            distance=summary.get("distance"),
            geometry=geometry,
        )


HEALTH_CHECK_COORDINATES = (
    Coordinate(lat=52.517037, lng=13.388860),
    Coordinate(lat=52.496891, lng=13.385983),
)


def check_health(base_url: str | None = None, api_key: str | None = None, profile: str | None = None) -> bool:
    """Check ORS availability with a minimal two-point directions request (Berlin area)."""
    base = (base_url or settings.ors_base_url).rstrip("/")
    if not base:
        return False
    key = api_key if api_key is not None else settings.ors_api_key
    headers = {"Accept": "application/json"}
    if key:
        headers["Authorization"] = key
    url = f"{base}/v2/directions/{profile or settings.default_profile}/json"
    body = {"coordinates": [coordinate.as_lng_lat() for coordinate in HEALTH_CHECK_COORDINATES]}
    try:
        response = httpx.post(url, json=body, headers=headers, timeout=5.0)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError):
        return False
    return isinstance(data, dict) and isinstance(data.get("routes"), list) and len(data["routes"]) > 0
