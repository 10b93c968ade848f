from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from zambezi_expedition.models import THREAT_CATEGORIES, GeoPoint, RouteData, ThreatMarker


def default_route_path() -> Path:
    return Path(__file__).resolve().parents[2] / "data" / "routes" / "zambezi_source.json"


def _point(raw: dict[str, Any]) -> GeoPoint:
    return GeoPoint(lat=float(raw["lat"]), lng=float(raw["lng"]))


def _marker(raw: dict[str, Any]) -> ThreatMarker:
    category = raw["category"]
    if category not in THREAT_CATEGORIES:
        raise ValueError(f"Unknown threat category: {category!r}")
    return ThreatMarker(position=_point(raw["position"]), label=raw["label"], category=category)


def load_route_data(path: Path) -> RouteData:
    payload = json.loads(path.read_text(encoding="utf-8"))
    route = tuple(_point(p) for p in payload.get("route", []))
    if not route:
        raise ValueError(f"Route file {path} has no route points")
    return RouteData(
        route=route,
        threat_markers=tuple(_marker(m) for m in payload.get("threat_markers", [])),
        wetlands=tuple(tuple(_point(p) for p in patch) for patch in payload.get("wetlands", [])),
        corridor=tuple(_point(p) for p in payload.get("corridor", [])),
        name=payload.get("name", path.stem),
    )


def default_route_data() -> RouteData:
    """Zambezi source route used by CLI/API/UI when no path is supplied."""
    path = default_route_path()
    if path.exists():
        return load_route_data(path)

    return RouteData(
        name="The Source of the Zambezi",
        route=(
            GeoPoint(-12.312, 22.244),
            GeoPoint(-12.221, 22.369),
            GeoPoint(-12.115, 22.51),
            GeoPoint(-12.048, 22.712),
            GeoPoint(-12.034, 22.932),
            GeoPoint(-12.102, 23.121),
            GeoPoint(-12.218, 23.312),
            GeoPoint(-12.401, 23.501),
        ),
        threat_markers=(
            ThreatMarker(GeoPoint(-12.29, 22.36), "Deforestation hotspot - woodland loss since 2010", "deforestation"),
            ThreatMarker(GeoPoint(-12.18, 22.65), "Fire cluster - increased burn frequency", "fire"),
            ThreatMarker(GeoPoint(-12.05, 22.91), "Logging area - road expansion risk", "logging"),
        ),
        wetlands=(
            (GeoPoint(-12.31, 22.21), GeoPoint(-12.29, 22.33), GeoPoint(-12.23, 22.38), GeoPoint(-12.19, 22.28)),
            (GeoPoint(-12.15, 22.55), GeoPoint(-12.12, 22.63), GeoPoint(-12.08, 22.59), GeoPoint(-12.12, 22.5)),
        ),
        corridor=(GeoPoint(-12.35, 22.14), GeoPoint(-12.02, 22.98), GeoPoint(-12.14, 23.45)),
    )
