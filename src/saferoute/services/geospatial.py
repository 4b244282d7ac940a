"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import LineString, Point

from ..models.domain import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
# Segment endpoints closer than this (in degrees, on both axes) are treated as a single point.
DEGENERATE_SEGMENT_DEGREES = 1e-5


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def bearing_radians(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate the initial bearing from a to b, in radians (-pi, pi]."""

    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    delta_lambda = math.radians(b.lng - a.lng)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    return math.atan2(y, x)


def bearing_degrees(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate the initial bearing from a to b in compass degrees [0, 360)."""

    return (math.degrees(bearing_radians(a, b)) + 360) % 360


def point_to_segment_m(point: GeoPoint, start: GeoPoint, end: GeoPoint) -> float:
    """Shortest distance in meters from ``point`` to the segment ``start``-``end``.

    Uses cross-track / along-track decomposition on a sphere. When the foot of the
    perpendicular falls outside the segment the distance to the nearer endpoint is
    returned instead. Adequate for tolerances of a few hundred meters; not
    geodesically exact for very long segments.
    """

    if (
        abs(start.lat - end.lat) < DEGENERATE_SEGMENT_DEGREES
        and abs(start.lng - end.lng) < DEGENERATE_SEGMENT_DEGREES
    ):
        return haversine_m(point, start)

    d13 = haversine_m(start, point)
    if d13 == 0.0:
        return 0.0
    segment_length = haversine_m(start, end)

    theta12 = bearing_radians(start, end)
    theta13 = bearing_radians(start, point)
    delta_theta = theta13 - theta12

    angular_d13 = d13 / EARTH_RADIUS_M
    dxt = math.asin(max(-1.0, min(1.0, math.sin(angular_d13) * math.sin(delta_theta)))) * EARTH_RADIUS_M

    cos_dxt = math.cos(dxt / EARTH_RADIUS_M)
    # A quarter great circle off the segment line, every along-track position is equidistant
    if abs(cos_dxt) < 1e-12:
        return abs(dxt)
    ratio = math.cos(angular_d13) / cos_dxt
    dat = math.acos(max(-1.0, min(1.0, ratio))) * EARTH_RADIUS_M
    # acos is unsigned; the point lies behind start when it is more than 90 degrees off the segment bearing.
    if math.cos(delta_theta) < 0:
        dat = -dat

    if dat > segment_length:
        return haversine_m(point, end)
    if dat < 0:
        return d13
    return abs(dxt)


def is_point_near_polyline(point: GeoPoint, coordinates: Sequence[GeoPoint], tolerance_m: float) -> bool:
    """Return True if ``point`` is within ``tolerance_m`` of any segment of the polyline."""

    if len(coordinates) < 2:
        raise ValueError("A polyline needs at least two coordinates.")

    for start, end in zip(coordinates, coordinates[1:]):
        if point_to_segment_m(point, start, end) <= tolerance_m:
            return True
    return False


def route_bounds(coordinates: Sequence[GeoPoint]) -> tuple[float, float, float, float]:
    """Return the bounding box of a polyline as (south, west, north, east)."""
    if not coordinates:
        raise ValueError("Cannot compute bounds of an empty polyline.")
    if len(coordinates) == 1:
        geometry = Point(coordinates[0].lng, coordinates[0].lat)
    else:
        geometry = LineString([(point.lng, point.lat) for point in coordinates])
    min_x, min_y, max_x, max_y = geometry.bounds
    return (min_y, min_x, max_y, max_x)
