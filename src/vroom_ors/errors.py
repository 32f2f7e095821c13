"""Exception hierarchy shared by the matrix, translation and solve layers."""

from __future__ import annotations

from typing import Any, Optional


class VroomOrsError(Exception):
    """Base class for every error raised by this package."""


class ProblemValidationError(VroomOrsError):
    """The incoming request cannot be turned into a routing problem."""


class UpstreamError(VroomOrsError):
    """A call to the directions service or the solver did not succeed."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None) -> None:
        self.service = service
        self.status_code = status_code
        self.message = message
        prefix = f"{service} API error"
        if status_code is not None:
            prefix = f"{prefix}: {status_code}"
        super().__init__(f"{prefix} - {message}")


class UpstreamRequestFailed(UpstreamError):
    """Non rate-limit failure. Never retried."""


class UpstreamRateLimited(UpstreamError):
    """Rate-limit responses persisted after every retry was spent."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = 429, attempts: int = 0) -> None:
        self.attempts = attempts
        super().__init__(service, message, status_code)


def is_rate_limit(error: BaseException) -> bool:
    """Return True when *error* signals that the upstream is throttling us.

    A known status code decides on its own; the message is only consulted when
    there is no status, since response bodies echo request coordinates.
    """
    if isinstance(error, UpstreamRateLimited):
        return True
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        return status_code == 429
    text = str(error).lower()
    return "rate limit" in text or "too many requests" in text


class LegUnresolved(VroomOrsError):
    """A single matrix leg could not be fetched, even after retries."""

    def __init__(self, from_index: int, to_index: int, cause: BaseException) -> None:
        self.from_index = from_index
        self.to_index = to_index
        self.cause = cause
        super().__init__(f"Failed to get directions from {from_index} to {to_index}: {cause}")


class MissingLocationError(VroomOrsError):
    """A job has no location while matrix-based routing requires one."""

    def __init__(self, entity_id: Any, entity: str = "Job") -> None:
        self.entity_id = entity_id
        self.entity = entity
        super().__init__(f"{entity} {entity_id} must have a location when using matrix-based routing")


class LocationNotFoundError(VroomOrsError):
    """A coordinate was looked up that the registry never saw."""

    def __init__(self, coordinate: Any) -> None:
        self.coordinate = coordinate
        super().__init__(f"Location {coordinate} not found in locations array")


class GeometryStitchFailure(VroomOrsError):
    """Encoded geometries could not be decoded or combined."""
