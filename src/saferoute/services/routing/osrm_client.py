"""HTTP client for the OSRM route service."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings
from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        alternatives: bool | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self.alternatives = alternatives if alternatives is not None else settings.osrm_alternatives

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def _request(self, url: str, params: dict[str, str]) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = _parse_body(response)
                    if data.get("code") != "Ok":
                        error_msg = data.get("message", data.get("code", "Unknown OSRM route error"))
                        raise ValueError(f"OSRM route request failed: {error_msg}")
                    return data
                except httpx.HTTPStatusError as exc:
                    # OSRM reports NoRoute/InvalidQuery as 400 with a JSON body
                    if exc.response.status_code == 400:
                        raise ValueError(f"OSRM rejected the route request: {exc.response.text}") from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"OSRM service at {self.base_url} returned HTTP {exc.response.status_code}"
                        ) from exc
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} attempts: {exc}")
                        raise ConnectionError(f"OSRM service at {self.base_url} timed out") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.TransportError, OSError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {exc}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def route(self, start: GeoPoint, end: GeoPoint) -> dict:
        """Raw OSRM route response between two points, including alternatives when enabled."""
        # OSRM expects "lon,lat;lon,lat"
        coordinate_str = f"{start.lng},{start.lat};{end.lng},{end.lat}"
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
            "alternatives": "true" if self.alternatives else "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        return self._request(url, params)

    def route_alternatives(self, start: GeoPoint, end: GeoPoint) -> list[dict]:
        """Alternatives between two points as ``{coordinates, summary}`` records."""
        routes = parse_routes(self.route(start, end))
        logger.info(f"OSRM returned {len(routes)} route alternative(s)")
        return routes


def _parse_body(response: httpx.Response) -> dict:
    # A garbled body is a service fault, not a bad request
    try:
        data = response.json()
    except ValueError as exc:
        raise ConnectionError(f"OSRM service returned a non-JSON response (HTTP {response.status_code})") from exc
    if not isinstance(data, dict):
        raise ConnectionError(f"OSRM service returned an unexpected {type(data).__name__} response body")
    return data


def _decode_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        chunk = ord(polyline[index]) - 63
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode_polyline(polyline: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode an encoded polyline string into (lat, lon) tuples.

    OSRM uses Google's polyline encoding with precision 5 unless ``polyline6`` is requested.
    """
    factor = 10 ** precision
    coordinates: list[tuple[float, float]] = []
    index = 0
    lat = 0
    lon = 0
    while index < len(polyline):
        d_lat, index = _decode_value(polyline, index)
        d_lon, index = _decode_value(polyline, index)
        lat += d_lat
        lon += d_lon
        coordinates.append((lat / factor, lon / factor))
    return coordinates


def _route_coordinates(geometry: Any) -> list[dict[str, float]]:
    if isinstance(geometry, str):
        points = decode_polyline(geometry)
    elif isinstance(geometry, dict) and geometry.get("type") == "LineString":
        points = [(lat, lon) for lon, lat in geometry.get("coordinates", [])]
    else:
        points = []
    return [{"lat": lat, "lng": lon} for lat, lon in points]


def parse_routes(payload: dict) -> list[dict]:
    """Convert an OSRM route response into ``{coordinates, summary}`` records."""
    routes = []
    for route in payload.get("routes") or []:
        routes.append(
            {
                "coordinates": _route_coordinates(route.get("geometry")),
                "summary": {
                    "totalDistance": float(route.get("distance") or 0.0),
                    "totalTime": float(route.get("duration") or 0.0),
                },
            }
        )
    return routes


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM availability with a minimal route request.

    Public OSRM endpoints have no /health endpoint, so a short route is requested instead.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        test_coords = "13.388860,52.517037;13.385983,52.496891"
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
