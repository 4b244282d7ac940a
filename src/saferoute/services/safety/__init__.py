"""Route safety scoring, ranking and selection."""

from .association import coerce_reports, coerce_routes, count_reports_near_route, normalize_category, normalize_location
from .panel import RouteSafetyPanel
from .ranking import ROUTE_STYLES, RouteSelection, fit_bounds, rank_routes, route_presentation
from .scoring import calculate_safety_score, heatmap_points, safety_label
from .session import RouteSafetySession, SessionSnapshot

__all__ = [
    "ROUTE_STYLES",
    "RouteSafetyPanel",
    "RouteSafetySession",
    "RouteSelection",
    "SessionSnapshot",
    "calculate_safety_score",
    "coerce_reports",
    "coerce_routes",
    "count_reports_near_route",
    "fit_bounds",
    "heatmap_points",
    "normalize_category",
    "normalize_location",
    "rank_routes",
    "route_presentation",
    "safety_label",
]
