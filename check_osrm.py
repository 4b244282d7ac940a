#!/usr/bin/env python3
"""Manual check that the configured OSRM service answers route requests."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from saferoute.config import settings
from saferoute.models.domain import GeoPoint
from saferoute.services.routing.osrm_client import OSRMClient, check_health


def main():
    print("=" * 60)
    print("OSRM Connection Test")
    print("=" * 60)
    print()

    print("1. Checking OSRM configuration...")
    if not settings.osrm_base_url:
        print("   [ERROR] SAFEROUTE_OSRM_BASE_URL is not configured")
        return 1
    print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
    print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    print()

    print("2. Testing OSRM health check...")
    if not check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    print("3. Requesting route alternatives...")
    try:
        client = OSRMClient()
        # Connaught Place -> India Gate, Delhi
        routes = client.route_alternatives(GeoPoint(28.6315, 77.2167), GeoPoint(28.6129, 77.2295))
    except (ConnectionError, ValueError) as e:
        print(f"   [ERROR] Route request failed: {e}")
        return 1
    for index, route in enumerate(routes):
        summary = route["summary"]
        print(
            f"   [OK] Alternative {index}: {len(route['coordinates'])} points, "
            f"{summary['totalDistance'] / 1000:.2f} km, {summary['totalTime'] / 60:.1f} min"
        )
    print()

    print("=" * 60)
    print("[SUCCESS] OSRM is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
