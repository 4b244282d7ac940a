"""Safety report persistence backed by Supabase or a local JSON file."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Protocol, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import SafetyReport
from ..services.safety.association import coerce_reports, normalize_category, normalize_location
from .filesystem import FileStorage

logger = logging.getLogger(__name__)

REPORTS_FILE_NAME = "reports.json"


class ReportStore(Protocol):
    def list_locations(self) -> list[SafetyReport]:
        ...

    def list_recent(self, limit: int | None = None) -> list[SafetyReport]:
        ...

    def submit(self, report: SafetyReport) -> str:
        ...


def split_timestamp(timestamp: str) -> tuple[str, str]:
    """Split an ISO-8601 timestamp into UTC ``YYYY-MM-DD`` and ``HH:MM:SS`` strings."""
    value = timestamp.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO-8601 timestamp '{timestamp}'") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat(), parsed.strftime("%H:%M:%S")


def build_report(category: str, description: str, location: Any, timestamp: str) -> SafetyReport:
    """Validate a submission and turn it into a storable report."""
    normalized_category = normalize_category(category)
    if normalized_category is None:
        raise ValueError(f"Unknown report category '{category}'. Expected safe, caution or danger.")
    point = normalize_location(location)
    if point is None:
        raise ValueError("Report location must be a numeric [lat, lng] pair.")
    if not description or not description.strip():
        raise ValueError("Report description is required.")
    date_part, time_part = split_timestamp(timestamp)
    return SafetyReport(
        category=normalized_category,
        location=point,
        description=description.strip(),
        date=date_part,
        time=time_part,
    )


def _sort_key(report: SafetyReport) -> tuple[str, str]:
    return (report.date or "", report.time or "")


class FileReportStore:
    """Reports kept in ``reports.json`` under the data root."""

    def __init__(self, storage: FileStorage | None = None) -> None:
        self.storage = storage or FileStorage()
        self.path = self.storage.path(REPORTS_FILE_NAME)
        self._lock = threading.Lock()

    def _load(self) -> list[dict]:
        data = self.storage.read_json(self.path, default=[])
        if not isinstance(data, list):
            raise ValueError(f"Report file '{self.path}' does not contain a list.")
        return data

    def list_locations(self) -> list[SafetyReport]:
        return coerce_reports(self._load())

    def list_recent(self, limit: int | None = None) -> list[SafetyReport]:
        limit = limit or settings.recent_reports_limit
        reports = sorted(self.list_locations(), key=_sort_key, reverse=True)
        return reports[:limit]

    def submit(self, report: SafetyReport) -> str:
        with self._lock:
            records = self._load()
            next_id = max((int(r["id"]) for r in records if str(r.get("id", "")).isdigit()), default=0) + 1
            records.append(
                {
                    "id": str(next_id),
                    "type": report.category.value,
                    "description": report.description,
                    "latitude": report.location.lat,
                    "longitude": report.location.lng,
                    "date": report.date,
                    "time": report.time,
                }
            )
            self.storage.write_json(self.path, records)
        logger.info(f"Saved {report.category.value} report {next_id} to {self.path}")
        return str(next_id)


class SupabaseReportStore:
    """Reports stored in the Supabase ``report`` table."""

    def __init__(self, client: Any, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.reports_table

    def _rows_to_reports(self, rows: Sequence[dict]) -> list[SafetyReport]:
        return coerce_reports(rows)

    def list_locations(self) -> list[SafetyReport]:
        response = self.client.table(self.table).select("id,type,latitude,longitude").execute()
        return self._rows_to_reports(response.data or [])

    def list_recent(self, limit: int | None = None) -> list[SafetyReport]:
        limit = limit or settings.recent_reports_limit
        response = (
            self.client.table(self.table)
            .select("*")
            .order("date", desc=True)
            .order("time", desc=True)
            .limit(limit)
            .execute()
        )
        return self._rows_to_reports(response.data or [])

    def submit(self, report: SafetyReport) -> str:
        record = {
            "type": report.category.value,
            "description": report.description,
            "latitude": report.location.lat,
            "longitude": report.location.lng,
            "date": report.date,
            "time": report.time,
        }
        response = self.client.table(self.table).insert(record).execute()
        rows = response.data or []
        if not rows or "id" not in rows[0]:
            raise ValueError("Report insert did not return an id.")
        report_id = str(rows[0]["id"])
        logger.info(f"Saved {report.category.value} report {report_id} to Supabase table '{self.table}'")
        return report_id


def get_report_store() -> ReportStore:
    """Supabase when configured, otherwise the local JSON file."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseReportStore(client)
    return FileReportStore()
