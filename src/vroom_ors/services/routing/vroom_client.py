"""HTTP client for a VROOM solver server."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ...errors import UpstreamRequestFailed
from ...schemas.routing import Solution, VroomProblem

SERVICE_NAME = "VROOM"

logger = logging.getLogger(__name__)


class VroomClient:
    """Posts a matrix-based problem to VROOM and parses the solution.

    Failures are never retried; any of them ends the solve operation.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint or settings.vroom_endpoint
        if not self.endpoint:
            raise ValueError("VROOM endpoint is not configured.")
        self.timeout = timeout if timeout is not None else settings.vroom_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=self._transport,
        )

    async def solve(self, problem: VroomProblem) -> Solution:
        payload = problem.to_payload()
        logger.debug(
            f"Submitting problem to VROOM: {len(payload.get('jobs', []))} jobs, "
            f"{len(payload.get('vehicles', []))} vehicles"
        )
        async with self._get_client() as client:
            try:
                response = await client.post(self.endpoint, json=payload)
            except httpx.TimeoutException as exc:
                raise UpstreamRequestFailed(SERVICE_NAME, f"Request timed out after {self.timeout}s: {exc}") from exc
            except httpx.HTTPError as exc:
                raise UpstreamRequestFailed(
                    SERVICE_NAME, f"Failed to connect to VROOM at {self.endpoint}: {exc}"
                ) from exc

        if response.is_error:
            raise UpstreamRequestFailed(SERVICE_NAME, response.text, status_code=response.status_code)
        try:
            return Solution.model_validate(response.json())
        except ValueError as exc:
            raise UpstreamRequestFailed(
                SERVICE_NAME, f"Unexpected solution payload: {exc}", status_code=response.status_code
            ) from exc
