"""FastAPI dependency providers."""

from __future__ import annotations

from ..services.routing.service import RoutingEngine


def get_routing_engine() -> RoutingEngine:
    """A fresh engine per request so matrices never leak across solve operations."""
    return RoutingEngine()
