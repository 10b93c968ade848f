"""Great-circle geometry along the expedition route."""

from __future__ import annotations

import math
from typing import Sequence

from zambezi_expedition.config import SETTINGS
from zambezi_expedition.models import GeoPoint, ThreatMarker


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def haversine_km(a: GeoPoint, b: GeoPoint, radius_km: float = SETTINGS.earth_radius_km) -> float:
    """Compute the great-circle distance in kilometers between two points.

    Args:
        a: First point, degrees.
        b: Second point, degrees.
        radius_km: Mean Earth radius.

    Returns:
        Non-negative distance in kilometers.
    """
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    h = _clamp(h, 0.0, 1.0)
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return radius_km * c


def build_cumulative_table(route: Sequence[GeoPoint], radius_km: float = SETTINGS.earth_radius_km) -> list[float]:
    """Prefix sums of segment lengths; entry i is the path length from route[0] to route[i]."""
    if not route:
        return []
    table = [0.0]
    for start, end in zip(route, route[1:]):
        table.append(table[-1] + haversine_km(start, end, radius_km))
    return table


def total_distance(table: Sequence[float]) -> float:
    return table[-1] if table else 0.0


def interpolate(
    route: Sequence[GeoPoint],
    table: Sequence[float],
    target_km: float,
    min_segment_km: float = SETTINGS.min_segment_km,
) -> GeoPoint:
    """Resolve a distance along the route into a position.

    The containing segment ends at the first table entry (from index 1) that is
    >= target_km, so ties resolve to the earliest segment even when it has zero
    length. Targets past the end fall on the final segment.
    """
    if len(route) < 2:
        return route[0]

    end_index = len(route) - 1
    for i in range(1, len(table)):
        if table[i] >= target_km:
            end_index = i
            break

    start = route[end_index - 1]
    end = route[end_index]
    segment_start = table[end_index - 1]
    segment_length = max(table[end_index] - segment_start, min_segment_km)
    t = _clamp((target_km - segment_start) / segment_length, 0.0, 1.0)

    return GeoPoint(
        lat=start.lat + (end.lat - start.lat) * t,
        lng=start.lng + (end.lng - start.lng) * t,
    )


def nearest_distance(point: GeoPoint, markers: Sequence[ThreatMarker]) -> float:
    """Minimum distance in km from point to any marker; 0.0 when there are none."""
    if not markers:
        return 0.0
    return min(haversine_km(point, marker.position) for marker in markers)
