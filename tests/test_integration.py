from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from saferoute.api.routes import health as health_routes
from saferoute.api.routes import reports as reports_routes
from saferoute.main import create_app
from saferoute.models.domain import GeoPoint
from saferoute.persistence.filesystem import FileStorage
from saferoute.persistence.reports import FileReportStore
from saferoute.services.routing import service as routing_service


def _route(*points: tuple[float, float], distance: float) -> dict:
    return {
        "coordinates": [{"lat": lat, "lng": lng} for lat, lng in points],
        "summary": {"totalDistance": distance, "totalTime": distance / 10},
    }


DIRECT = _route((0.0, 0.0), (0.0, 0.02), distance=2224.0)
DETOUR = _route((0.0, 0.0), (0.01, 0.01), (0.0, 0.02), distance=3145.0)


class DummyOSRM:
    def route_alternatives(self, start, end):
        return [DIRECT, DETOUR]


class UnreachableOSRM:
    def route_alternatives(self, start, end):
        raise ConnectionError("Failed to connect to OSRM service at http://osrm.test")


class DummyGeocoder:
    places = {"Start": GeoPoint(0.0, 0.0), "End": GeoPoint(0.0, 0.02)}

    def geocode(self, query):
        if query not in self.places:
            raise ValueError(f'No results for "{query}"')
        return self.places[query]


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    store = FileReportStore(FileStorage(root=tmp_path))
    monkeypatch.setattr(reports_routes, "get_report_store", lambda: store)
    monkeypatch.setattr(health_routes, "get_report_store", lambda: store)
    monkeypatch.setattr(routing_service, "get_report_store", lambda: store)
    monkeypatch.setattr(routing_service, "OSRMClient", DummyOSRM)
    monkeypatch.setattr(routing_service, "NominatimClient", DummyGeocoder)
    return TestClient(create_app())


def _submit(client: TestClient, category: str, location: list[float]) -> dict:
    response = client.post(
        "/api/reports",
        json={
            "category": category,
            "description": f"{category} spotted",
            "location": location,
            "timestamp": "2024-03-01T21:00:00Z",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _plan(client: TestClient, **extra) -> dict:
    body = {"start": {"lat": 0.0, "lng": 0.0}, "end": {"lat": 0.0, "lng": 0.02}, **extra}
    response = client.post("/api/routes/plan", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_report_submission_and_listing(api_client: TestClient):
    created = _submit(api_client, "Danger", [0.0, 0.01])
    _submit(api_client, "safe", [1.0, 1.0])

    assert created["id"] == "1"
    locations = api_client.get("/api/reports").json()
    assert locations[0] == {"category": "danger", "location": [0.0, 0.01]}

    details = api_client.get("/api/reports/details", params={"limit": 1}).json()
    assert len(details) == 1
    assert details[0]["date"] == "2024-03-01"

    heatmap = api_client.get("/api/reports/heatmap").json()
    assert heatmap == [[0.0, 0.01, 1.0], [1.0, 1.0, 0.2]]


def test_unknown_category_is_rejected(api_client: TestClient):
    response = api_client.post(
        "/api/reports",
        json={"category": "spooky", "description": "x", "location": [0.0, 0.0], "timestamp": "2024-03-01T21:00:00Z"},
    )

    assert response.status_code == 422


def test_bad_timestamp_is_rejected(api_client: TestClient):
    response = api_client.post(
        "/api/reports",
        json={"category": "safe", "description": "x", "location": [0.0, 0.0], "timestamp": "last tuesday"},
    )

    assert response.status_code == 400


def test_plan_ranks_detour_first_when_direct_route_has_danger(api_client: TestClient):
    _submit(api_client, "danger", [0.0, 0.01])

    plan = _plan(api_client)

    assert plan["selected_index"] == 0
    assert plan["report_count"] == 1
    first, second = plan["routes"]
    assert (first["name"], first["overall_safety_score"], first["label"]) == ("Safest Route", 100.0, "Very Safe")
    assert first["distance_m"] == 3145.0
    assert (second["name"], second["overall_safety_score"], second["label"]) == ("Alternative 1", 70.0, "Safe")
    assert second["safety_score"] == {"danger": 1, "caution": 0, "safe": 0}
    assert first["style"]["dash_array"] is None
    assert second["style"]["dash_array"] == "10, 10"
    assert plan["fit_bounds"] == pytest.approx([0.0, 0.0, 0.01, 0.02])


def test_plan_with_place_names(api_client: TestClient):
    response = api_client.post("/api/routes/plan", json={"start_query": "Start", "end_query": "End"})

    assert response.status_code == 200, response.text
    assert len(response.json()["routes"]) == 2


def test_unknown_place_name_returns_400(api_client: TestClient):
    response = api_client.post("/api/routes/plan", json={"start_query": "Nowhere", "end_query": "End"})

    assert response.status_code == 400


def test_missing_endpoint_fails_validation(api_client: TestClient):
    response = api_client.post("/api/routes/plan", json={"start": {"lat": 0.0, "lng": 0.0}})

    assert response.status_code == 422


def test_selection_and_panel_flow(api_client: TestClient):
    _plan(api_client)

    selected = api_client.post("/api/routes/select", json={"index": 1}).json()
    assert selected["selected_index"] == 1
    assert [route["is_selected"] for route in selected["routes"]] == [False, True]

    ignored = api_client.post("/api/routes/select", json={"index": 7}).json()
    assert ignored["selected_index"] == 1

    hidden = api_client.post("/api/routes/panel", json={}).json()
    assert hidden["panel_visible"] is False
    assert hidden["selected_index"] == 1

    shown = api_client.post("/api/routes/panel", json={"visible": True}).json()
    assert shown["panel_visible"] is True


def test_refresh_rescores_with_new_reports(api_client: TestClient):
    plan = _plan(api_client)
    assert [route["overall_safety_score"] for route in plan["routes"]] == [100.0, 100.0]

    _submit(api_client, "caution", [0.0, 0.01])
    refreshed = api_client.post("/api/routes/refresh").json()

    assert [route["overall_safety_score"] for route in refreshed["routes"]] == [100.0, 80.0]
    assert refreshed["routes"][0]["distance_m"] == 3145.0


def test_routing_outage_keeps_previous_routes(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    _plan(api_client)
    monkeypatch.setattr(routing_service, "OSRMClient", UnreachableOSRM)

    response = api_client.post(
        "/api/routes/plan",
        json={"start": {"lat": 1.0, "lng": 1.0}, "end": {"lat": 1.0, "lng": 1.02}},
    )

    assert response.status_code == 502
    current = api_client.get("/api/routes/current").json()
    assert len(current["routes"]) == 2


def test_current_is_empty_before_planning(api_client: TestClient):
    current = api_client.get("/api/routes/current").json()

    assert current["routes"] == []
    assert current["fit_bounds"] is None


def test_health_endpoints(api_client: TestClient):
    _submit(api_client, "caution", [0.0, 0.01])

    assert api_client.get("/api/health").json() == {"status": "ok"}
    reports_health = api_client.get("/api/health/reports").json()
    assert reports_health["backend"] == "file"
    assert reports_health["report_count"] == 1


def test_refresh_keeps_requested_tolerance(api_client: TestClient):
    _submit(api_client, "danger", [0.0, 0.01])
    plan = _plan(api_client, tolerance_m=2000)
    assert plan["tolerance_m"] == 2000
    assert [route["safety_score"]["danger"] for route in plan["routes"]] == [1, 1]

    refreshed = api_client.post("/api/routes/refresh").json()

    assert refreshed["tolerance_m"] == 2000
    assert [route["safety_score"]["danger"] for route in refreshed["routes"]] == [1, 1]
    assert [route["distance_m"] for route in refreshed["routes"]] == [2224.0, 3145.0]
