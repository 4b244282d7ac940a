"""Read-only projection of ranked routes for the route safety panel."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import PanelRow, RankedRoute
from .scoring import safety_label_with_tone


def meters_to_km(meters: float) -> float:
    return round(meters / 1000.0, 2)


def seconds_to_minutes(seconds: float) -> float:
    return round(seconds / 60.0, 1)


def panel_row(route: RankedRoute, selected_index: int) -> PanelRow:
    label, tone = safety_label_with_tone(route.score)
    selected = route.rank == selected_index
    return PanelRow(
        rank=route.rank,
        name=route.name,
        color=route.color,
        distance_km=meters_to_km(route.route.summary.total_distance_m),
        duration_min=seconds_to_minutes(route.route.summary.total_time_s),
        danger=route.breakdown.danger,
        caution=route.breakdown.caution,
        safe=route.breakdown.safe,
        score=route.score,
        label=label,
        label_tone=tone,
        is_selected=selected,
        is_dashed=not selected,
    )


class RouteSafetyPanel:
    """Visibility of the route safety panel. Independent of route selection and scores."""

    def __init__(self, visible: bool = True) -> None:
        self.visible = visible

    def toggle(self) -> bool:
        self.visible = not self.visible
        return self.visible

    def set_visible(self, visible: bool) -> bool:
        self.visible = visible
        return self.visible

    @staticmethod
    def rows(ranked: Sequence[RankedRoute], selected_index: int) -> list[PanelRow]:
        return [panel_row(route, selected_index) for route in ranked]
