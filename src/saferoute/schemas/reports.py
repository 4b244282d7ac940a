"""Safety report request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import SafetyReport
from ..services.safety.association import normalize_category


class ReportSubmission(BaseModel):
    category: str = Field(..., description="One of safe, caution or danger (case-insensitive).")
    description: str = Field(..., min_length=1)
    location: List[float] = Field(..., min_length=2, max_length=2, description="[lat, lng]")
    timestamp: str = Field(..., description="ISO-8601 timestamp of the observation.")

    @field_validator("category")
    @classmethod
    def _normalize_category(cls, value: str) -> str:
        category = normalize_category(value)
        if category is None:
            raise ValueError("category must be one of safe, caution, danger")
        return category.value


class ReportSubmissionResponse(BaseModel):
    message: str
    id: str


class ReportLocationModel(BaseModel):
    category: str
    location: List[float]

    @classmethod
    def from_domain(cls, report: SafetyReport) -> "ReportLocationModel":
        return cls(category=report.category.value, location=report.location.as_pair())


class ReportDetailModel(BaseModel):
    id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    category: str
    description: str
    location: List[float]

    @classmethod
    def from_domain(cls, report: SafetyReport) -> "ReportDetailModel":
        return cls(
            id=report.id,
            date=report.date,
            time=report.time,
            category=report.category.value,
            description=report.description,
            location=report.location.as_pair(),
        )
