import pytest

from saferoute.models.domain import GeoPoint
from saferoute.services.safety.session import RouteSafetySession


def _route(*points: tuple[float, float]) -> dict:
    return {
        "coordinates": [{"lat": lat, "lng": lng} for lat, lng in points],
        "summary": {"totalDistance": 1000.0, "totalTime": 120.0},
    }


DIRECT = _route((0.0, 0.0), (0.0, 0.02))
DETOUR = _route((0.0, 0.0), (0.01, 0.01), (0.0, 0.02))
DANGER_ON_DIRECT = {"category": "danger", "location": [0.0, 0.01]}


class DummyRouter:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def route_alternatives(self, start, end):
        self.calls.append((start, end))
        return self.routes


class FailingRouter:
    def route_alternatives(self, start, end):
        raise ConnectionError("OSRM service is not reachable")


def test_recompute_publishes_ranking_and_selects_safest():
    session = RouteSafetySession(tolerance_m=400)

    ranked = session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT])

    assert [route.route.source_index for route in ranked] == [1, 0]
    assert session.selected_index == 0
    assert session.selected_route.route.source_index == 1


def test_fresh_computation_resets_selection():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [])
    session.select(1)

    session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT])

    assert session.selected_index == 0


def test_out_of_range_selection_is_ignored():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [])
    session.select(1)

    assert session.select(5) is False
    assert session.selected_index == 1


def test_panel_visibility_does_not_touch_selection_or_scores():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT])
    session.select(1)
    before = session.snapshot()

    session.toggle_panel()
    hidden = session.snapshot()
    session.set_panel_visible(True)
    shown = session.snapshot()

    assert hidden.panel_visible is False
    assert shown.panel_visible is True
    assert hidden.selected_index == shown.selected_index == 1
    assert [route.score for route in hidden.routes] == [route.score for route in before.routes]


def test_stale_computation_is_discarded():
    session = RouteSafetySession(tolerance_m=400)
    older = session.begin()
    newer = session.begin()

    fresh = session.compute([DIRECT, DETOUR], [])
    stale = session.compute([DIRECT], [DANGER_ON_DIRECT])

    assert session.publish(newer, [], fresh) is True
    assert session.publish(older, [], stale) is False
    assert [route.score for route in session.ranked_routes] == [100.0, 100.0]


def test_plan_uses_router_alternatives():
    session = RouteSafetySession(tolerance_m=400)
    router = DummyRouter([DIRECT, DETOUR])
    start, end = GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.02)

    ranked = session.plan(start, end, router, [DANGER_ON_DIRECT])

    assert router.calls == [(start, end)]
    assert [route.score for route in ranked] == [100.0, 70.0]


def test_router_failure_keeps_previous_ranking():
    session = RouteSafetySession(tolerance_m=400)
    session.plan(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.02), DummyRouter([DIRECT, DETOUR]), [])
    session.select(1)

    with pytest.raises(ConnectionError):
        session.plan(GeoPoint(1.0, 1.0), GeoPoint(1.0, 1.02), FailingRouter(), [])

    assert len(session.ranked_routes) == 2
    assert session.selected_index == 1
    assert session.snapshot().last_error == "OSRM service is not reachable"


def test_refresh_reports_rescores_current_routes():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [])
    session.select(1)

    ranked = session.refresh_reports([DANGER_ON_DIRECT])

    assert [route.score for route in ranked] == [100.0, 70.0]
    assert session.selected_index == 0


def test_tolerance_override_changes_association():
    session = RouteSafetySession(tolerance_m=400)

    ranked = session.recompute([DETOUR], [DANGER_ON_DIRECT], tolerance_m=1000)

    assert ranked[0].breakdown.danger == 1
    assert session.tolerance_m == 400


def test_snapshot_of_empty_session():
    snapshot = RouteSafetySession(tolerance_m=400).snapshot()

    assert snapshot.routes == []
    assert snapshot.selected_index == 0
    assert snapshot.fit_bounds is None
    assert snapshot.panel_rows == []


def test_snapshot_bounds_follow_selected_route():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT])

    assert session.snapshot().fit_bounds == pytest.approx((0.0, 0.0, 0.01, 0.02))
    session.select(1)
    assert session.snapshot().fit_bounds == pytest.approx((0.0, 0.0, 0.0, 0.02))


def test_tolerance_must_be_positive():
    with pytest.raises(ValueError):
        RouteSafetySession(tolerance_m=0)


def test_refresh_keeps_the_planned_tolerance():
    session = RouteSafetySession(tolerance_m=400)
    router = DummyRouter([DIRECT, DETOUR])
    planned = session.plan(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.02), router, [DANGER_ON_DIRECT], tolerance_m=2000)

    refreshed = session.refresh_reports([DANGER_ON_DIRECT])

    assert [(r.route.source_index, r.breakdown.danger) for r in planned] == [(0, 1), (1, 1)]
    assert [(r.route.source_index, r.breakdown.danger) for r in refreshed] == [(0, 1), (1, 1)]
    assert session.snapshot().tolerance_m == 2000
    assert session.tolerance_m == 400


def test_new_plan_without_override_returns_to_default_tolerance():
    session = RouteSafetySession(tolerance_m=400)
    session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT], tolerance_m=2000)

    session.recompute([DIRECT, DETOUR], [DANGER_ON_DIRECT])

    assert session.snapshot().tolerance_m == 400
