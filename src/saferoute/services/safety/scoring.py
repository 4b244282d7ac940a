"""Safety score and label calculation for a route's report breakdown."""

from __future__ import annotations

from typing import Iterable, Mapping

from ...models.domain import ReportCategory, SafetyReport, SafetyScoreBreakdown
from .association import coerce_reports

DANGER_WEIGHT = 3
CAUTION_WEIGHT = 2
SAFE_WEIGHT = 1
POINTS_PER_WEIGHT = 10
MAX_SCORE = 100.0

# (inclusive lower bound, label, tone), evaluated top-down.
SAFETY_LABELS: tuple[tuple[float, str, str], ...] = (
    (80.0, "Very Safe", "#16a34a"),
    (60.0, "Safe", "#22c55e"),
    (40.0, "Moderate", "#eab308"),
    (20.0, "Caution", "#f97316"),
)
HIGH_RISK_LABEL = ("High Risk", "#dc2626")

HEATMAP_WEIGHTS = {
    ReportCategory.DANGER: 1.0,
    ReportCategory.CAUTION: 0.5,
    ReportCategory.SAFE: 0.2,
}


def weighted_risk(breakdown: SafetyScoreBreakdown) -> int:
    """Danger and caution add risk weight; safe reports only offset it."""
    return (
        breakdown.danger * DANGER_WEIGHT
        + breakdown.caution * CAUTION_WEIGHT
        - breakdown.safe * SAFE_WEIGHT
    )


def calculate_safety_score(breakdown: SafetyScoreBreakdown) -> float:
    """Return a score in [0, 100]; 100 means no net risk near the route."""
    risk = max(weighted_risk(breakdown), 0)
    return max(0.0, min(MAX_SCORE, MAX_SCORE - risk * POINTS_PER_WEIGHT))


def safety_label_with_tone(score: float) -> tuple[str, str]:
    for threshold, label, tone in SAFETY_LABELS:
        if score >= threshold:
            return label, tone
    return HIGH_RISK_LABEL


def safety_label(score: float) -> str:
    return safety_label_with_tone(score)[0]


def heatmap_points(reports: Iterable[SafetyReport | Mapping]) -> list[list[float]]:
    """Weighted ``[lat, lng, intensity]`` triples for a heatmap layer.

    Reports with an unknown category or a bad location are left out.
    """
    return [
        [report.location.lat, report.location.lng, HEATMAP_WEIGHTS[report.category]]
        for report in coerce_reports(reports)
    ]
