"""Route planning orchestration: geocode, fetch alternatives, rank by safety."""

from __future__ import annotations

import logging

from ...models.domain import GeoPoint
from ...persistence.reports import get_report_store
from ...schemas.routing import PointModel, RoutePlanRequest
from ..geocoding.nominatim import NominatimClient
from ..safety.session import RouteSafetySession, SessionSnapshot
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


def _resolve_point(point: PointModel | None, query: str | None, geocoder: NominatimClient | None) -> GeoPoint:
    if point is not None:
        return point.to_domain()
    if geocoder is None:
        raise ValueError("A place name was given but no geocoder is available.")
    return geocoder.geocode(query or "")


def plan_safe_routes(payload: RoutePlanRequest, session: RouteSafetySession) -> SessionSnapshot:
    """Plan alternatives between the requested endpoints and publish them ranked by safety.

    Collaborator failures propagate to the caller; the session keeps its previous ranking.
    """
    geocoder = None
    if payload.start is None or payload.end is None:
        geocoder = NominatimClient()
    start = _resolve_point(payload.start, payload.start_query, geocoder)
    end = _resolve_point(payload.end, payload.end_query, geocoder)

    try:
        router = OSRMClient()
    except ValueError as e:
        logger.error(f"OSRM client initialization failed: {e}")
        raise ValueError("OSRM service is not configured. Please check SAFEROUTE_OSRM_BASE_URL.") from e

    reports = get_report_store().list_locations()
    session.plan(start, end, router, reports, tolerance_m=payload.tolerance_m)
    snapshot = session.snapshot()
    if snapshot.routes:
        logger.info(
            f"Planned {len(snapshot.routes)} route(s) from {start.lat:.5f},{start.lng:.5f} "
            f"to {end.lat:.5f},{end.lng:.5f}; safest score {snapshot.routes[0].score:.0f}"
        )
    else:
        logger.warning("Routing service returned no usable routes")
    return snapshot


def refresh_route_safety(session: RouteSafetySession) -> SessionSnapshot:
    """Re-score the current alternatives against the latest report set."""
    reports = get_report_store().list_locations()
    session.refresh_reports(reports)
    return session.snapshot()
