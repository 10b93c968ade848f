from __future__ import annotations

import random

import pytest

pytest.importorskip("streamlit")
pytest.importorskip("plotly")

from zambezi_expedition.demo_ui import render_route_map, render_telemetry_chart  # noqa: E402
from zambezi_expedition.engine import ExpeditionEngine  # noqa: E402
from zambezi_expedition.models import ExpeditionLogEntry, GeoPoint  # noqa: E402
from zambezi_expedition.simulator import default_route_data  # noqa: E402


def test_route_map_includes_every_overlay() -> None:
    data = default_route_data()
    entry = ExpeditionLogEntry(id="a", title="Otter", icon="observation", created_at=1, position=GeoPoint(-12.0, 22.5))
    fig = render_route_map(data, data.route[0], (entry,))

    names = [trace.name for trace in fig.data]
    assert "Expedition route" in names
    assert "Threats" in names
    assert "Conservation corridor" in names
    assert "Expedition logs" in names
    assert names[-1] == "Expedition"


def test_route_map_overlays_can_be_hidden() -> None:
    data = default_route_data()
    fig = render_route_map(
        data,
        data.route[0],
        show_threats=False,
        show_wetlands=False,
        show_corridor=False,
        show_logs=False,
    )
    assert [trace.name for trace in fig.data] == ["Expedition route", "Expedition"]


def test_telemetry_chart_plots_history() -> None:
    engine = ExpeditionEngine(rng=random.Random(1))
    state = engine.initial_state()
    for _ in range(4):
        state = engine.step(state)

    fig = render_telemetry_chart(state.snapshot.history)
    assert len(fig.data) == 2
    assert list(fig.data[0].x) == [0, 1, 2, 3, 4]
    assert list(fig.data[1].y) == [s.ph for s in state.snapshot.history]


def test_browser_sessions_share_one_log_store(tmp_path) -> None:
    from zambezi_expedition.demo_ui import shared_log_store

    path = tmp_path / "store.json"
    try:
        first = shared_log_store(path, "logs")
        second = shared_log_store(path, "logs")
        assert first is second
        first.create("Otter", "", "observation", GeoPoint(-12.0, 22.5))
        assert [entry.title for entry in second.entries] == ["Otter"]
    finally:
        shared_log_store.clear()
