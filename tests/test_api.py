from __future__ import annotations

import random
import time

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from zambezi_expedition.api import create_app  # noqa: E402
from zambezi_expedition.config import SimulationSettings  # noqa: E402
from zambezi_expedition.engine import ExpeditionEngine, ExpeditionSession  # noqa: E402
from zambezi_expedition.logbook import ExpeditionLogStore, InMemoryKeyValueStore, KeyValueLogStorage  # noqa: E402


@pytest.fixture()
def client() -> TestClient:
    session = ExpeditionSession(
        ExpeditionEngine(rng=random.Random(5)),
        log_store=ExpeditionLogStore(KeyValueLogStorage(InMemoryKeyValueStore())),
    )
    with TestClient(create_app(session, background_ticks=False)) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_snapshot_and_tick(client: TestClient) -> None:
    first = client.get("/snapshot").json()
    assert first["tick"] == 0
    assert len(first["history"]) == 1

    ticked = client.post("/tick").json()
    assert ticked["tick"] == 1
    assert client.get("/snapshot").json()["tick"] == 1


def test_snapshot_with_alerts(client: TestClient) -> None:
    payload = client.get("/snapshot", params={"include_alerts": True}).json()
    assert [a["time_ago"] for a in payload["alerts"]] == ["5 min ago", "8 min ago", "11 min ago"]


def test_log_create_and_lookup(client: TestClient) -> None:
    client.post("/tick")
    created = client.post("/logs", json={"title": "Spotted otter", "icon": "observation"}).json()["entry"]
    assert created["body"] == ""
    assert created["position"] == client.get("/snapshot").json()["position"]

    assert client.get(f"/logs/{created['id']}").json() == created
    assert [e["id"] for e in client.get("/logs").json()["logs"]] == [created["id"]]


def test_log_with_empty_title_is_not_stored(client: TestClient) -> None:
    response = client.post("/logs", json={"title": "   "})
    assert response.status_code == 200
    assert response.json() == {"entry": None}
    assert client.get("/logs").json() == {"logs": []}


def test_unknown_log_is_404(client: TestClient) -> None:
    assert client.get("/logs/missing").status_code == 404


def test_invalid_icon_is_422(client: TestClient) -> None:
    assert client.post("/logs", json={"title": "x", "icon": "bogus"}).status_code == 422


def test_background_ticker_runs_for_app_lifetime() -> None:
    session = ExpeditionSession(ExpeditionEngine(rng=random.Random(5), settings=SimulationSettings(tick_interval_ms=10)))
    app = create_app(session)

    with TestClient(app) as test_client:
        time.sleep(0.3)
        assert app.state.ticker.running
        assert test_client.get("/snapshot").json()["tick"] >= 1

    assert not app.state.ticker.running
    ticks_after_shutdown = session.snapshot().tick
    time.sleep(0.1)
    assert session.snapshot().tick == ticks_after_shutdown
