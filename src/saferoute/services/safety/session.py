"""Stateful route safety session: recomputation, superseding, selection and panel state."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol, Sequence

from ...config import settings
from ...models.domain import GeoPoint, PanelRow, RankedRoute, Route, RoutePresentation, RouteStyle, SafetyReport
from .association import coerce_reports, coerce_routes
from .panel import RouteSafetyPanel
from .ranking import ROUTE_STYLES, RouteSelection, apply_selection, fit_bounds, rank_routes, route_presentation

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    def route_alternatives(self, start: GeoPoint, end: GeoPoint) -> list[dict]:
        ...


@dataclass(slots=True)
class SessionSnapshot:
    """Everything a presentation layer needs to draw the current state."""

    routes: list[RankedRoute]
    selected_index: int
    panel_visible: bool
    panel_rows: list[PanelRow]
    presentation: list[RoutePresentation]
    fit_bounds: tuple[float, float, float, float] | None = None
    tolerance_m: float = 0.0
    last_error: str | None = None
    generation: int = 0
    report_count: int = 0


class RouteSafetySession:
    """Holds the latest published ranking for one planning session.

    Each recomputation runs to completion before it is published. A computation
    started earlier than the most recent ``begin()`` is discarded on publish, so
    stale and fresh results are never mixed. When the routing service fails the
    previously published ranking is kept.
    """

    def __init__(
        self,
        tolerance_m: float | None = None,
        palette: Sequence[RouteStyle] = ROUTE_STYLES,
    ) -> None:
        self.tolerance_m = tolerance_m if tolerance_m is not None else settings.proximity_tolerance_m
        if self.tolerance_m <= 0:
            raise ValueError("Proximity tolerance must be positive.")
        self.palette = tuple(palette)
        self.selection = RouteSelection()
        self.panel = RouteSafetyPanel()
        self.last_error: str | None = None
        self._lock = threading.Lock()
        self._generation = 0
        self._routes: list[Route] = []
        self._ranked: list[RankedRoute] = []
        self._report_count = 0
        self._active_tolerance_m = self.tolerance_m

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    @property
    def ranked_routes(self) -> list[RankedRoute]:
        with self._lock:
            return apply_selection(self._ranked, self.selection.index)

    @property
    def active_tolerance_m(self) -> float:
        """Tolerance the published ranking was computed with."""
        with self._lock:
            return self._active_tolerance_m

    @property
    def selected_index(self) -> int:
        return self.selection.index

    @property
    def selected_route(self) -> RankedRoute | None:
        with self._lock:
            if not self._ranked:
                return None
            return self._ranked[self.selection.index]

    def begin(self) -> int:
        """Start a new computation and return its generation token."""
        with self._lock:
            self._generation += 1
            return self._generation

    def publish(
        self,
        token: int,
        routes: Sequence[Route],
        ranked: Sequence[RankedRoute],
        report_count: int = 0,
        tolerance_m: float | None = None,
    ) -> bool:
        """Publish a finished computation unless a newer one has started since."""
        with self._lock:
            if token != self._generation:
                logger.info(f"Discarding superseded computation {token} (latest is {self._generation})")
                return False
            self._routes = list(routes)
            self._ranked = list(ranked)
            self._report_count = report_count
            self._active_tolerance_m = tolerance_m if tolerance_m is not None else self.tolerance_m
            self.selection.reset(len(self._ranked))
            self.last_error = None
            return True

    def compute(
        self,
        routes: Iterable[Route | Mapping],
        reports: Iterable[SafetyReport | Mapping],
        tolerance_m: float | None = None,
    ) -> list[RankedRoute]:
        return rank_routes(
            routes,
            reports,
            tolerance_m if tolerance_m is not None else self.tolerance_m,
            palette=self.palette,
        )

    def recompute(
        self,
        routes: Iterable[Route | Mapping],
        reports: Iterable[SafetyReport | Mapping],
        tolerance_m: float | None = None,
    ) -> list[RankedRoute]:
        token = self.begin()
        valid_routes = coerce_routes(routes)
        report_list = coerce_reports(reports)
        effective = tolerance_m if tolerance_m is not None else self.tolerance_m
        ranked = self.compute(valid_routes, report_list, effective)
        self.publish(token, valid_routes, ranked, report_count=len(report_list), tolerance_m=effective)
        return self.ranked_routes

    def refresh_reports(
        self,
        reports: Iterable[SafetyReport | Mapping],
        tolerance_m: float | None = None,
    ) -> list[RankedRoute]:
        """Re-score the current route set after the report set changed.

        Keeps the tolerance of the published ranking unless one is given.
        """
        if tolerance_m is None:
            tolerance_m = self.active_tolerance_m
        return self.recompute(self.routes, reports, tolerance_m)

    def plan(
        self,
        start: GeoPoint,
        end: GeoPoint,
        router: RouteProvider,
        reports: Iterable[SafetyReport | Mapping],
        tolerance_m: float | None = None,
    ) -> list[RankedRoute]:
        """Fetch alternatives between two points and rank them."""
        token = self.begin()
        try:
            raw_routes = router.route_alternatives(start, end)
        except Exception as exc:
            self.last_error = str(exc)
            logger.warning(f"Routing request failed, keeping previous ranking: {exc}")
            raise

        valid_routes = coerce_routes(raw_routes)
        report_list = coerce_reports(reports)
        effective = tolerance_m if tolerance_m is not None else self.tolerance_m
        ranked = self.compute(valid_routes, report_list, effective)
        self.publish(token, valid_routes, ranked, report_count=len(report_list), tolerance_m=effective)
        return self.ranked_routes

    def select(self, index: int) -> bool:
        with self._lock:
            return self.selection.select(index)

    def toggle_panel(self) -> bool:
        return self.panel.toggle()

    def set_panel_visible(self, visible: bool) -> bool:
        return self.panel.set_visible(visible)

    def snapshot(self, hovered_index: int | None = None) -> SessionSnapshot:
        with self._lock:
            selected_index = self.selection.index
            ranked = apply_selection(self._ranked, selected_index)
            generation = self._generation
            report_count = self._report_count
            tolerance_m = self._active_tolerance_m

        bounds = None
        if ranked:
            bounds = fit_bounds(ranked[selected_index])
        return SessionSnapshot(
            routes=ranked,
            selected_index=selected_index,
            panel_visible=self.panel.visible,
            panel_rows=self.panel.rows(ranked, selected_index),
            presentation=route_presentation(ranked, selected_index, hovered_index),
            fit_bounds=bounds,
            tolerance_m=tolerance_m,
            last_error=self.last_error,
            generation=generation,
            report_count=report_count,
        )
