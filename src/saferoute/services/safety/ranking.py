"""Ranking of alternative routes by safety, selection state and line styling."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from ...models.domain import RankedRoute, Route, RoutePresentation, RouteStyle, SafetyReport
from ..geospatial import route_bounds
from .association import coerce_reports, coerce_routes, count_reports_near_route
from .scoring import calculate_safety_score, safety_label

logger = logging.getLogger(__name__)

ROUTE_STYLES: tuple[RouteStyle, ...] = (
    RouteStyle(name="Safest Route", color="#059669"),
    RouteStyle(name="Alternative 1", color="#2563eb"),
    RouteStyle(name="Alternative 2", color="#dc2626"),
    RouteStyle(name="Alternative 3", color="#7c3aed"),
)

SELECTED_WEIGHT = 8
UNSELECTED_WEIGHT = 4
HOVER_WEIGHT = 6
UNSELECTED_OPACITY = 0.6
UNSELECTED_DASH = "10, 10"


def style_for_rank(rank: int, palette: Sequence[RouteStyle] = ROUTE_STYLES) -> RouteStyle:
    """Display identity for a rank position; the palette is reused cyclically."""
    return palette[rank % len(palette)]


def rank_routes(
    routes: Iterable[Route | Mapping],
    reports: Iterable[SafetyReport | Mapping],
    tolerance_m: float,
    *,
    selected_index: int = 0,
    palette: Sequence[RouteStyle] = ROUTE_STYLES,
) -> list[RankedRoute]:
    """Score every route against the report set and order them safest first.

    Routes with equal scores keep their input order. Malformed routes and
    reports are dropped rather than failing the whole batch.
    """
    valid_routes = coerce_routes(routes)
    valid_reports = coerce_reports(reports)

    scored = []
    for route in valid_routes:
        breakdown = count_reports_near_route(route, valid_reports, tolerance_m)
        score = calculate_safety_score(breakdown)
        scored.append((route, breakdown, score))

    # list.sort is stable, so ties preserve the collaborator's order
    scored.sort(key=lambda item: item[2], reverse=True)

    ranked = [
        RankedRoute(
            route=route,
            breakdown=breakdown,
            score=score,
            label=safety_label(score),
            rank=rank,
            style=style_for_rank(rank, palette),
            is_selected=rank == selected_index,
        )
        for rank, (route, breakdown, score) in enumerate(scored)
    ]
    logger.info(
        f"Ranked {len(ranked)} route(s) against {len(valid_reports)} report(s) "
        f"(tolerance {tolerance_m:.0f} m)"
    )
    return ranked


def apply_selection(ranked: Sequence[RankedRoute], selected_index: int) -> list[RankedRoute]:
    """Return the ranked list with exactly the route at ``selected_index`` marked selected."""
    return [replace(route, is_selected=route.rank == selected_index) for route in ranked]


def route_presentation(
    ranked: Sequence[RankedRoute],
    selected_index: int,
    hovered_index: int | None = None,
) -> list[RoutePresentation]:
    """Line styling for each ranked route given the current selection."""
    presentation: list[RoutePresentation] = []
    for position, route in enumerate(ranked):
        if position == selected_index:
            presentation.append(
                RoutePresentation(
                    rank=position,
                    color=route.color,
                    weight=SELECTED_WEIGHT,
                    opacity=1.0,
                    dash_array=None,
                    is_selected=True,
                    is_hovered=position == hovered_index,
                )
            )
            continue
        hovered = position == hovered_index
        presentation.append(
            RoutePresentation(
                rank=position,
                color=route.color,
                weight=HOVER_WEIGHT if hovered else UNSELECTED_WEIGHT,
                opacity=1.0 if hovered else UNSELECTED_OPACITY,
                dash_array=UNSELECTED_DASH,
                is_selected=False,
                is_hovered=hovered,
            )
        )
    return presentation


def fit_bounds(route: RankedRoute | Route) -> tuple[float, float, float, float]:
    """View request for a route: its ``(south, west, north, east)`` bounding box."""
    base = route.route if isinstance(route, RankedRoute) else route
    return route_bounds(base.coordinates)


class RouteSelection:
    """The currently selected rank index. At most one route is selected at a time."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self.route_count = 0

    def reset(self, route_count: int) -> None:
        """A fresh ranking always selects the safest route."""
        self.index = 0
        self.route_count = route_count

    def select(self, index: int) -> bool:
        """Select ``index``; out-of-range values leave the selection unchanged."""
        if index < 0 or index >= self.route_count:
            logger.debug(f"Ignoring selection {index}: only {self.route_count} route(s) available")
            return False
        self.index = index
        return True

    @property
    def has_selection(self) -> bool:
        return self.route_count > 0
