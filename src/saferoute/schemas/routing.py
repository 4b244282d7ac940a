"""Route planning request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import GeoPoint
from ..services.safety.session import SessionSnapshot


class PointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class RoutePlanRequest(BaseModel):
    start: Optional[PointModel] = None
    end: Optional[PointModel] = None
    start_query: Optional[str] = Field(default=None, description="Place name to geocode when start is omitted.")
    end_query: Optional[str] = Field(default=None, description="Place name to geocode when end is omitted.")
    tolerance_m: Optional[float] = Field(
        default=None,
        gt=0,
        description="Override for the report-to-route proximity tolerance in meters.",
    )

    @model_validator(mode="after")
    def _require_endpoints(self) -> "RoutePlanRequest":
        if self.start is None and not (self.start_query and self.start_query.strip()):
            raise ValueError("Either start or start_query is required.")
        if self.end is None and not (self.end_query and self.end_query.strip()):
            raise ValueError("Either end or end_query is required.")
        return self


class RouteSelectRequest(BaseModel):
    index: int


class PanelVisibilityRequest(BaseModel):
    visible: Optional[bool] = Field(default=None, description="Omit to toggle the current visibility.")


class SafetyBreakdownModel(BaseModel):
    danger: int
    caution: int
    safe: int


class RoutePresentationModel(BaseModel):
    color: str
    weight: int
    opacity: float
    dash_array: Optional[str] = None


class RankedRouteModel(BaseModel):
    rank: int
    name: str
    color: str
    is_selected: bool
    is_dashed: bool
    distance_m: float
    duration_s: float
    distance_km: float
    duration_min: float
    safety_score: SafetyBreakdownModel
    overall_safety_score: float
    label: str
    label_tone: str
    coordinates: List[List[float]]
    style: RoutePresentationModel


class RoutePlanResponse(BaseModel):
    routes: List[RankedRouteModel]
    selected_index: int
    panel_visible: bool
    fit_bounds: Optional[List[float]] = Field(
        default=None,
        description="Bounding box of the selected route as [south, west, north, east].",
    )
    tolerance_m: float
    report_count: int

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "RoutePlanResponse":
        routes = []
        for ranked, row, style in zip(snapshot.routes, snapshot.panel_rows, snapshot.presentation):
            routes.append(
                RankedRouteModel(
                    rank=ranked.rank,
                    name=row.name,
                    color=row.color,
                    is_selected=row.is_selected,
                    is_dashed=row.is_dashed,
                    distance_m=ranked.route.summary.total_distance_m,
                    duration_s=ranked.route.summary.total_time_s,
                    distance_km=row.distance_km,
                    duration_min=row.duration_min,
                    safety_score=SafetyBreakdownModel(danger=row.danger, caution=row.caution, safe=row.safe),
                    overall_safety_score=row.score,
                    label=row.label,
                    label_tone=row.label_tone,
                    coordinates=[point.as_pair() for point in ranked.route.coordinates],
                    style=RoutePresentationModel(
                        color=style.color,
                        weight=style.weight,
                        opacity=style.opacity,
                        dash_array=style.dash_array,
                    ),
                )
            )
        return cls(
            routes=routes,
            selected_index=snapshot.selected_index,
            panel_visible=snapshot.panel_visible,
            fit_bounds=list(snapshot.fit_bounds) if snapshot.fit_bounds else None,
            tolerance_m=snapshot.tolerance_m,
            report_count=snapshot.report_count,
        )
