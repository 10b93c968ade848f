from __future__ import annotations

import json
from pathlib import Path

import pytest

from zambezi_expedition import simulator
from zambezi_expedition.models import GeoPoint
from zambezi_expedition.simulator import default_route_data, default_route_path, load_route_data


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_default_route_file_ships_with_repo() -> None:
    assert default_route_path().exists()


def test_builtin_fallback_matches_route_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from_file = load_route_data(default_route_path())
    monkeypatch.setattr(simulator, "default_route_path", lambda: tmp_path / "missing.json")
    builtin = default_route_data()

    assert builtin.route == from_file.route
    assert builtin.threat_markers == from_file.threat_markers
    assert builtin.wetlands == from_file.wetlands
    assert builtin.corridor == from_file.corridor


def test_load_minimal_route(tmp_path: Path) -> None:
    path = _write(tmp_path / "route.json", {"route": [{"lat": -12, "lng": 22.5}]})
    data = load_route_data(path)

    assert data.route == (GeoPoint(-12.0, 22.5),)
    assert data.threat_markers == ()
    assert data.name == "route"


def test_route_without_points_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "empty.json", {"route": []})
    with pytest.raises(ValueError):
        load_route_data(path)


def test_unknown_threat_category_is_rejected(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "bad.json",
        {
            "route": [{"lat": -12, "lng": 22.5}],
            "threat_markers": [{"position": {"lat": -12, "lng": 22}, "label": "?", "category": "flood"}],
        },
    )
    with pytest.raises(ValueError):
        load_route_data(path)
