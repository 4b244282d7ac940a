"""Forward geocoding of place names through Nominatim."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)


class NominatimClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout

    def search(self, query: str, limit: int = 1) -> list[dict]:
        params = {"format": "json", "q": query, "limit": str(limit)}
        try:
            response = httpx.get(
                f"{self.base_url}/search",
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ConnectionError(
                f"Geocoding service returned HTTP {exc.response.status_code} for '{query}'"
            ) from exc
        except httpx.HTTPError as exc:
            raise ConnectionError(f"Geocoding service at {self.base_url} is not reachable: {exc}") from exc
        return response.json()

    def geocode(self, query: str) -> GeoPoint:
        """Resolve a place name to its best-matching coordinate."""
        if not query or not query.strip():
            raise ValueError("A place name is required for geocoding.")
        results = self.search(query.strip())
        if not results:
            raise ValueError(f'No results for "{query}"')
        best = results[0]
        try:
            point = GeoPoint(lat=float(best["lat"]), lng=float(best["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f'Geocoding result for "{query}" has no usable coordinates') from exc
        logger.debug(f"Geocoded '{query}' to {point.lat:.5f},{point.lng:.5f}")
        return point
