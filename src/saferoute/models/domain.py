"""Domain models for safety reports, routes and their safety rankings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReportCategory(str, Enum):
    """Canonical report categories. Input strings are normalized to these at ingestion."""

    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in degrees (WGS84, no datum correction)."""

    lat: float
    lng: float

    def as_pair(self) -> list[float]:
        return [self.lat, self.lng]


@dataclass(frozen=True, slots=True)
class SafetyReport:
    """A user-submitted street safety report."""

    category: ReportCategory
    location: GeoPoint
    id: Optional[str] = None
    description: str = ""
    date: Optional[str] = None
    time: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RouteSummary:
    total_distance_m: float
    total_time_s: float


@dataclass(frozen=True, slots=True)
class Route:
    """An alternative returned by the routing service: an ordered polyline plus its summary."""

    coordinates: tuple[GeoPoint, ...]
    summary: RouteSummary
    source_index: int = 0


@dataclass(frozen=True, slots=True)
class SafetyScoreBreakdown:
    danger: int = 0
    caution: int = 0
    safe: int = 0

    @property
    def total(self) -> int:
        return self.danger + self.caution + self.safe


@dataclass(frozen=True, slots=True)
class RouteStyle:
    name: str
    color: str


@dataclass(frozen=True, slots=True)
class RankedRoute:
    """A route with its computed safety data and its display identity."""

    route: Route
    breakdown: SafetyScoreBreakdown
    score: float
    label: str
    rank: int
    style: RouteStyle
    is_selected: bool = False

    @property
    def name(self) -> str:
        return self.style.name

    @property
    def color(self) -> str:
        return self.style.color

    @property
    def is_dashed(self) -> bool:
        return not self.is_selected


@dataclass(frozen=True, slots=True)
class RoutePresentation:
    """Line styling for one ranked route, derived from the current selection."""

    rank: int
    color: str
    weight: int
    opacity: float
    dash_array: Optional[str]
    is_selected: bool
    is_hovered: bool = False


@dataclass(slots=True)
class PanelRow:
    """One route entry as shown in the route safety panel."""

    rank: int
    name: str
    color: str
    distance_km: float
    duration_min: float
    danger: int
    caution: int
    safe: int
    score: float
    label: str
    label_tone: str
    is_selected: bool
    is_dashed: bool
