import pytest

from zambezi_expedition.geo import (
    build_cumulative_table,
    haversine_km,
    interpolate,
    nearest_distance,
    total_distance,
)
from zambezi_expedition.models import GeoPoint, ThreatMarker
from zambezi_expedition.simulator import default_route_data

ROUTE = default_route_data().route
MARKERS = default_route_data().threat_markers


def _in_box(p: GeoPoint, a: GeoPoint, b: GeoPoint, eps: float = 1e-12) -> bool:
    return (
        min(a.lat, b.lat) - eps <= p.lat <= max(a.lat, b.lat) + eps
        and min(a.lng, b.lng) - eps <= p.lng <= max(a.lng, b.lng) + eps
    )


def test_haversine_is_symmetric() -> None:
    pairs = [
        (GeoPoint(-12.312, 22.244), GeoPoint(-12.401, 23.501)),
        (GeoPoint(0.0, 0.0), GeoPoint(45.0, 90.0)),
        (GeoPoint(51.5, -0.12), GeoPoint(-33.9, 151.2)),
    ]
    for a, b in pairs:
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))
        assert haversine_km(a, b) > 0.0


def test_haversine_same_point_is_zero() -> None:
    for point in ROUTE:
        assert haversine_km(point, point) == pytest.approx(0.0, abs=1e-9)


def test_haversine_one_degree_of_longitude_at_equator() -> None:
    assert haversine_km(GeoPoint(0.0, 0.0), GeoPoint(0.0, 1.0)) == pytest.approx(111.195, abs=0.01)


def test_cumulative_table_is_monotonic_from_zero() -> None:
    table = build_cumulative_table(ROUTE)

    assert len(table) == len(ROUTE)
    assert table[0] == 0.0
    assert all(later >= earlier for earlier, later in zip(table, table[1:]))
    assert total_distance(table) == pytest.approx(table[-1])


def test_cumulative_table_for_single_point() -> None:
    assert build_cumulative_table([GeoPoint(-12.0, 22.5)]) == [0.0]
    assert total_distance([]) == 0.0


def test_interpolate_single_point_route_always_returns_it() -> None:
    only = GeoPoint(-12.0, 22.5)
    table = build_cumulative_table([only])
    for target in (-5.0, 0.0, 3.2, 1e6):
        assert interpolate([only], table, target) == only


def test_interpolate_at_total_distance_returns_last_point() -> None:
    table = build_cumulative_table(ROUTE)
    position = interpolate(ROUTE, table, table[-1])

    assert position.lat == pytest.approx(ROUTE[-1].lat)
    assert position.lng == pytest.approx(ROUTE[-1].lng)


def test_interpolate_at_zero_returns_first_point() -> None:
    table = build_cumulative_table(ROUTE)
    assert interpolate(ROUTE, table, 0.0) == ROUTE[0]


def test_interpolate_stays_within_selected_segment() -> None:
    table = build_cumulative_table(ROUTE)
    for i in range(1, len(ROUTE)):
        for frac in (0.0, 0.25, 0.5, 0.75, 1.0):
            target = table[i - 1] + (table[i] - table[i - 1]) * frac
            position = interpolate(ROUTE, table, target)
            assert _in_box(position, ROUTE[i - 1], ROUTE[i])


def test_interpolate_clamps_targets_outside_route() -> None:
    table = build_cumulative_table(ROUTE)

    before = interpolate(ROUTE, table, -10.0)
    after = interpolate(ROUTE, table, table[-1] + 10.0)

    assert before == ROUTE[0]
    assert after.lat == pytest.approx(ROUTE[-1].lat)
    assert after.lng == pytest.approx(ROUTE[-1].lng)


def test_interpolate_ties_resolve_to_earliest_segment() -> None:
    a = GeoPoint(-12.0, 22.0)
    b = GeoPoint(-12.0, 22.2)
    route = [a, a, b]
    table = build_cumulative_table(route)

    assert table[1] == 0.0
    # The zero-length first segment matches target 0 and is used as-is.
    assert interpolate(route, table, 0.0) == a
    midpoint = interpolate(route, table, table[-1] / 2)
    assert midpoint.lat == pytest.approx(-12.0)
    assert midpoint.lng == pytest.approx(22.1, abs=1e-6)


def test_nearest_distance_empty_markers_is_zero() -> None:
    assert nearest_distance(GeoPoint(-12.1, 22.5), []) == 0.0


def test_nearest_distance_is_minimum_over_markers() -> None:
    point = GeoPoint(-12.115, 22.51)
    expected = min(haversine_km(point, marker.position) for marker in MARKERS)
    assert nearest_distance(point, MARKERS) == pytest.approx(expected)


def test_nearest_distance_on_marker_is_zero() -> None:
    marker = ThreatMarker(GeoPoint(-12.18, 22.65), "Fire cluster", "fire")
    assert nearest_distance(marker.position, [marker]) == pytest.approx(0.0, abs=1e-9)
