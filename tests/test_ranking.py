from saferoute.models.domain import GeoPoint, ReportCategory, SafetyReport
from saferoute.services.safety.ranking import (
    ROUTE_STYLES,
    RouteSelection,
    apply_selection,
    fit_bounds,
    rank_routes,
    route_presentation,
    style_for_rank,
)


def _route(*points: tuple[float, float], distance: float = 1000.0, duration: float = 120.0) -> dict:
    return {
        "coordinates": [{"lat": lat, "lng": lng} for lat, lng in points],
        "summary": {"totalDistance": distance, "totalTime": duration},
    }


def _report(category: str, lat: float, lng: float) -> SafetyReport:
    return SafetyReport(category=ReportCategory(category), location=GeoPoint(lat, lng))


# Straight east along the equator, and a northern detour between the same endpoints.
DIRECT = _route((0.0, 0.0), (0.0, 0.02), distance=2224.0)
DETOUR = _route((0.0, 0.0), (0.01, 0.01), (0.0, 0.02), distance=3145.0)
FAR_SOUTH = _route((-0.05, 0.0), (-0.05, 0.02))


def test_routes_are_ordered_safest_first():
    reports = [_report("danger", 0.0, 0.01)]  # on DIRECT, ~786 m from DETOUR

    ranked = rank_routes([DIRECT, DETOUR], reports, tolerance_m=400)

    assert [route.route.source_index for route in ranked] == [1, 0]
    assert [route.score for route in ranked] == [100.0, 70.0]
    assert [route.label for route in ranked] == ["Very Safe", "Safe"]
    assert [route.rank for route in ranked] == [0, 1]


def test_display_identity_follows_rank_not_input_position():
    reports = [_report("danger", 0.0, 0.01)]

    ranked = rank_routes([DIRECT, DETOUR], reports, tolerance_m=400)

    assert ranked[0].name == "Safest Route"
    assert ranked[0].color == ROUTE_STYLES[0].color
    assert ranked[1].name == "Alternative 1"


def test_tied_scores_keep_input_order():
    # A danger report at the shared start point touches DIRECT and DETOUR equally.
    reports = [_report("danger", 0.0, 0.0)]

    ranked = rank_routes([DIRECT, DETOUR, FAR_SOUTH], reports, tolerance_m=400)

    assert [route.score for route in ranked] == [100.0, 70.0, 70.0]
    assert [route.route.source_index for route in ranked] == [2, 0, 1]


def test_palette_is_reused_cyclically():
    routes = [_route((0.0, 0.001 * i), (0.001, 0.001 * i)) for i in range(5)]

    ranked = rank_routes(routes, [], tolerance_m=400)

    assert [route.style for route in ranked] == [*ROUTE_STYLES, ROUTE_STYLES[0]]
    assert style_for_rank(4) == ROUTE_STYLES[0]


def test_empty_inputs():
    assert rank_routes([], [_report("danger", 0.0, 0.0)], tolerance_m=400) == []

    ranked = rank_routes([DIRECT, DETOUR], [], tolerance_m=400)
    assert all(route.score == 100.0 and route.label == "Very Safe" for route in ranked)


def test_malformed_route_does_not_break_ranking():
    broken = {"coordinates": [{"lat": 0.0, "lng": 0.0}], "summary": {}}

    ranked = rank_routes([broken, DIRECT], [], tolerance_m=400)

    assert len(ranked) == 1
    assert ranked[0].route.source_index == 1


def test_unknown_category_reports_are_not_counted():
    reports = [{"category": "suspicious", "location": [0.0, 0.01]}, {"category": "DANGER", "location": [0.0, 0.01]}]

    ranked = rank_routes([DIRECT], reports, tolerance_m=400)

    assert ranked[0].breakdown.danger == 1
    assert ranked[0].breakdown.total == 1


def test_first_route_is_selected_by_default():
    ranked = rank_routes([DIRECT, DETOUR], [], tolerance_m=400)

    assert [route.is_selected for route in ranked] == [True, False]
    assert [route.is_dashed for route in ranked] == [False, True]


def test_apply_selection_marks_exactly_one_route():
    ranked = rank_routes([DIRECT, DETOUR, FAR_SOUTH], [], tolerance_m=400)

    reselected = apply_selection(ranked, 2)

    assert [route.is_selected for route in reselected] == [False, False, True]
    assert [route.is_selected for route in ranked] == [True, False, False]


def test_presentation_switches_styles_with_selection():
    ranked = rank_routes([DIRECT, DETOUR], [], tolerance_m=400)

    before = route_presentation(ranked, 0)
    after = route_presentation(ranked, 1)

    assert (before[0].dash_array, before[0].weight, before[0].opacity) == (None, 8, 1.0)
    assert (before[1].dash_array, before[1].weight, before[1].opacity) == ("10, 10", 4, 0.6)
    assert (after[0].dash_array, after[0].weight, after[0].opacity) == ("10, 10", 4, 0.6)
    assert (after[1].dash_array, after[1].weight, after[1].opacity) == (None, 8, 1.0)
    assert [style.is_selected for style in after].count(True) == 1


def test_presentation_highlights_hovered_unselected_route():
    ranked = rank_routes([DIRECT, DETOUR], [], tolerance_m=400)

    styles = route_presentation(ranked, 0, hovered_index=1)

    assert (styles[1].weight, styles[1].opacity, styles[1].dash_array) == (6, 1.0, "10, 10")
    assert styles[0].weight == 8


def test_selection_ignores_out_of_range_indexes():
    selection = RouteSelection()
    selection.reset(3)

    assert selection.select(2)
    assert not selection.select(3)
    assert not selection.select(-1)
    assert selection.index == 2


def test_selection_resets_to_safest_route():
    selection = RouteSelection()
    selection.reset(3)
    selection.select(1)

    selection.reset(2)

    assert selection.index == 0
    assert selection.has_selection


def test_empty_selection_has_nothing_selected():
    selection = RouteSelection()
    selection.reset(0)

    assert not selection.select(0)
    assert not selection.has_selection


def test_fit_bounds_covers_the_whole_route():
    ranked = rank_routes([DETOUR], [], tolerance_m=400)

    assert fit_bounds(ranked[0]) == (0.0, 0.0, 0.01, 0.02)
    assert fit_bounds(ranked[0].route) == fit_bounds(ranked[0])
