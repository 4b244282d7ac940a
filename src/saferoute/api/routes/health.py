"""Health endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from ...persistence.reports import SupabaseReportStore, get_report_store

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Liveness probe with no collaborator calls."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    # Imported lazily so a broken routing config cannot block startup
    from ...services.routing.osrm_client import check_health

    return {"service": "osrm", "healthy": check_health()}


@router.get("/health/reports", status_code=status.HTTP_200_OK)
def health_reports() -> dict:
    """Which report store is active and whether it can be read."""
    store = get_report_store()
    backend = "supabase" if isinstance(store, SupabaseReportStore) else "file"
    try:
        count = len(store.list_locations())
    except Exception as exc:
        logging.warning(f"Report store health check failed: {exc}")
        return {"service": "reports", "backend": backend, "healthy": False, "error": str(exc)}
    return {"service": "reports", "backend": backend, "healthy": True, "report_count": count}
