"""Safety report endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...persistence.reports import build_report, get_report_store
from ...schemas.reports import (
    ReportDetailModel,
    ReportLocationModel,
    ReportSubmission,
    ReportSubmissionResponse,
)
from ...services.safety.scoring import heatmap_points

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[ReportLocationModel], status_code=status.HTTP_200_OK)
def list_reports() -> list[ReportLocationModel]:
    """Category and location of every report, for map markers and route scoring."""
    try:
        reports = get_report_store().list_locations()
    except Exception as exc:
        logging.exception(f"Error fetching reports: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch reports: {str(exc)}",
        ) from exc
    return [ReportLocationModel.from_domain(report) for report in reports]


@router.get("/details", response_model=list[ReportDetailModel], status_code=status.HTTP_200_OK)
def list_report_details(
    limit: int | None = Query(default=None, ge=1, le=500, description="Maximum number of recent reports"),
) -> list[ReportDetailModel]:
    try:
        reports = get_report_store().list_recent(limit)
    except Exception as exc:
        logging.exception(f"Error fetching report details: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch report details: {str(exc)}",
        ) from exc
    return [ReportDetailModel.from_domain(report) for report in reports]


@router.get("/heatmap", response_model=list[list[float]], status_code=status.HTTP_200_OK)
def get_heatmap() -> list[list[float]]:
    """Weighted [lat, lng, intensity] points; danger weighs most."""
    return heatmap_points(get_report_store().list_locations())


@router.post("", response_model=ReportSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_report(payload: ReportSubmission) -> ReportSubmissionResponse:
    try:
        report = build_report(payload.category, payload.description, payload.location, payload.timestamp)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        report_id = get_report_store().submit(report)
    except Exception as exc:
        logging.exception(f"Error saving report: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save report.",
        ) from exc
    return ReportSubmissionResponse(message="Report saved successfully.", id=report_id)
