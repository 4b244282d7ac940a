"""Normalization of collaborator data and association of reports with routes."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

from ...models.domain import (
    GeoPoint,
    ReportCategory,
    Route,
    RouteSummary,
    SafetyReport,
    SafetyScoreBreakdown,
)
from ..geospatial import is_point_near_polyline

logger = logging.getLogger(__name__)

_LAT_KEYS = ("lat", "latitude")
_LNG_KEYS = ("lng", "lon", "longitude")


def _coerce_coordinate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _first_present(data: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def normalize_location(value: Any) -> GeoPoint | None:
    """Normalize a ``[lat, lng]`` pair, a ``{lat, lng}`` mapping or a GeoPoint.

    Returns None when the location is missing or not numeric.
    """
    if isinstance(value, GeoPoint):
        lat, lng = value.lat, value.lng
    elif isinstance(value, Mapping):
        lat = _first_present(value, _LAT_KEYS)
        lng = _first_present(value, _LNG_KEYS)
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lat, lng = value
    else:
        return None

    lat_value = _coerce_coordinate(lat)
    lng_value = _coerce_coordinate(lng)
    if lat_value is None or lng_value is None:
        return None
    return GeoPoint(lat=lat_value, lng=lng_value)


def normalize_category(value: Any) -> ReportCategory | None:
    """Map a category string onto the canonical enum, case-insensitively."""
    if isinstance(value, ReportCategory):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ReportCategory(value.strip().lower())
    except ValueError:
        return None


def coerce_report(item: SafetyReport | Mapping[str, Any]) -> SafetyReport | None:
    if isinstance(item, SafetyReport):
        category = normalize_category(item.category)
        if category is None:
            return None
        return item if category is item.category else replace(item, category=category)
    if not isinstance(item, Mapping):
        return None

    category = normalize_category(item.get("category", item.get("type")))
    if category is None:
        return None
    location = normalize_location(item.get("location"))
    if location is None and ("latitude" in item or "lat" in item):
        location = normalize_location(item)
    if location is None:
        return None

    raw_id = item.get("id")
    return SafetyReport(
        category=category,
        location=location,
        id=str(raw_id) if raw_id is not None else None,
        description=str(item.get("description") or ""),
        date=item.get("date"),
        time=item.get("time"),
    )


def coerce_reports(items: Iterable[SafetyReport | Mapping[str, Any]]) -> list[SafetyReport]:
    """Normalize raw report records, skipping those with a bad location or unknown category."""
    reports: list[SafetyReport] = []
    skipped = 0
    for item in items:
        report = coerce_report(item)
        if report is None:
            skipped += 1
            continue
        reports.append(report)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed report(s) (unknown category or invalid location)")
    return reports


def coerce_route(item: Route | Mapping[str, Any], source_index: int = 0) -> Route | None:
    """Convert the routing collaborator's route shape into a Route.

    Returns None when fewer than two usable coordinates remain.
    """
    if isinstance(item, Route):
        return item if len(item.coordinates) >= 2 else None
    if not isinstance(item, Mapping):
        return None

    coordinates = []
    for raw_point in item.get("coordinates") or []:
        point = normalize_location(raw_point)
        if point is None:
            return None
        coordinates.append(point)
    if len(coordinates) < 2:
        return None

    summary = item.get("summary") or {}
    distance = _coerce_coordinate(summary.get("totalDistance", summary.get("total_distance_m")))
    duration = _coerce_coordinate(summary.get("totalTime", summary.get("total_time_s")))
    return Route(
        coordinates=tuple(coordinates),
        summary=RouteSummary(total_distance_m=distance or 0.0, total_time_s=duration or 0.0),
        source_index=source_index,
    )


def coerce_routes(items: Iterable[Route | Mapping[str, Any]]) -> list[Route]:
    routes: list[Route] = []
    for index, item in enumerate(items):
        route = coerce_route(item, source_index=index)
        if route is None:
            logger.warning(f"Skipping route {index}: fewer than two valid coordinates")
            continue
        routes.append(route)
    return routes


def reports_near_route(route: Route, reports: Sequence[SafetyReport], tolerance_m: float) -> list[SafetyReport]:
    """Return the reports lying within ``tolerance_m`` of the route polyline."""
    return [
        report
        for report in reports
        if is_point_near_polyline(report.location, route.coordinates, tolerance_m)
    ]


def count_reports_near_route(
    route: Route,
    reports: Sequence[SafetyReport],
    tolerance_m: float,
) -> SafetyScoreBreakdown:
    counts = {category: 0 for category in ReportCategory}
    for report in reports_near_route(route, reports, tolerance_m):
        if report.category in counts:
            counts[report.category] += 1
    return SafetyScoreBreakdown(
        danger=counts[ReportCategory.DANGER],
        caution=counts[ReportCategory.CAUTION],
        safe=counts[ReportCategory.SAFE],
    )
