#!/usr/bin/env python3
"""Helper script to check and create the .env file used by the API."""

from pathlib import Path
import os

TEMPLATE = """# Supabase report store (optional - reports fall back to data/reports.json)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
SAFEROUTE_SUPABASE_URL=https://your-project-id.supabase.co
SAFEROUTE_SUPABASE_KEY=your-service-role-key-here
SAFEROUTE_REPORTS_TABLE=report

# API Configuration
SAFEROUTE_API_PREFIX=/api
SAFEROUTE_DATA_ROOT=./data

# Routing and geocoding collaborators
SAFEROUTE_OSRM_BASE_URL=https://routing.openstreetmap.de/routed-car
SAFEROUTE_NOMINATIM_BASE_URL=https://nominatim.openstreetmap.org

# Reports within this many meters of a route count against it
SAFEROUTE_PROXIMITY_TOLERANCE_M=400
"""


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:20] + "..." + value[-6:]
    return value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("SafeRoute Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f".env file NOT found at: {env_file}")
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"Created template .env file at: {env_file}")
        print("Edit it and re-run this script.")
        return

    print(f"Found .env file at: {env_file}")
    print("-" * 60)
    with open(env_file, "r", encoding="utf-8") as f:
        for line in f.read().split("\n"):
            if "SAFEROUTE_SUPABASE_KEY" in line and "=" in line:
                name, value = line.split("=", 1)
                print(f"{name}={_mask(value.strip())}")
            else:
                print(line)
    print("-" * 60)
    print()

    for name in ("SAFEROUTE_SUPABASE_URL", "SAFEROUTE_SUPABASE_KEY", "SAFEROUTE_OSRM_BASE_URL"):
        value = os.getenv(name)
        print(f"{name} (from environment): {_mask(value) if value else 'not set'}")
    print()

    try:
        import sys
        sys.path.insert(0, str(project_root / "src"))
        from saferoute.config import settings
    except Exception as e:
        print(f"Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    print(f"OSRM base URL:        {settings.osrm_base_url}")
    print(f"Nominatim base URL:   {settings.nominatim_base_url}")
    print(f"Proximity tolerance:  {settings.proximity_tolerance_m:.0f} m")
    print(f"Data root:            {settings.data_root}")
    if settings.supabase_url and settings.supabase_key:
        print("Report store:         Supabase")
    else:
        print("Report store:         local JSON file (Supabase not configured)")


if __name__ == "__main__":
    main()
