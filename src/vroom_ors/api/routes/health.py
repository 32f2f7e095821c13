"""Health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Liveness probe; never calls ORS or VROOM."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


def _get_ors_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.ors_client import check_health as ors_health_check
    return ors_health_check


@router.get("/health/ors", status_code=status.HTTP_200_OK)
def health_ors() -> dict:
    """Check ORS directions service health."""
    try:
        ors_health_check = _get_ors_health_check()
        return {"service": "ors", "healthy": ors_health_check()}
    except Exception as e:
        return {"service": "ors", "healthy": False, "error": str(e)}
