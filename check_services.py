#!/usr/bin/env python3
"""Verify ORS connectivity and build a small matrix against the configured service."""

import asyncio
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from vroom_ors.config import settings
from vroom_ors.models.domain import Coordinate
from vroom_ors.services.routing.matrix import MatrixBuilder
from vroom_ors.services.routing.ors_client import ORSClient, check_health


def main():
    print("=" * 60)
    print("ORS Connection Test")
    print("=" * 60)
    print()

    print("1. Checking ORS configuration...")
    print(f"   [OK] ORS Base URL: {settings.ors_base_url}")
    print(f"   [OK] ORS API key: {'configured' if settings.ors_api_key else 'missing'}")
    print(f"   [OK] Profile: {settings.default_profile}")
    print()

    print("2. Testing ORS health check...")
    if not check_health():
        print("   [ERROR] ORS service is not responding")
        return 1
    print("   [OK] ORS service is healthy and accessible!")
    print()

    print("3. Building a 3x3 matrix (Berlin)...")
    locations = [
        Coordinate(lat=52.517037, lng=13.388860),
        Coordinate(lat=52.496891, lng=13.385983),
        Coordinate(lat=52.520008, lng=13.404954),
    ]
    matrix = asyncio.run(MatrixBuilder(ORSClient()).build(locations))
    for row in matrix.durations:
        print(f"   {row}")
    print(f"   [OK] {len(matrix.geometries)} leg geometries, {len(matrix.unresolved)} unresolved legs")
    print()
    print("=" * 60)
    return 0 if not matrix.unresolved else 1


if __name__ == "__main__":
    sys.exit(main())
