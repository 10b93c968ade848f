"""Optional FastAPI layer serving live expedition snapshots.

Install extras first:
    pip install -e '.[api]'
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from pydantic import BaseModel

from zambezi_expedition.clock import PeriodicTicker
from zambezi_expedition.config import load_settings
from zambezi_expedition.engine import ExpeditionEngine, ExpeditionSession
from zambezi_expedition.logbook import open_file_store
from zambezi_expedition.models import LogIcon

try:
    from fastapi import FastAPI, HTTPException
except ModuleNotFoundError as exc:  # pragma: no cover
    raise SystemExit(
        "FastAPI not installed. Run: pip install -e '.[api]'"
    ) from exc


class LogCreateRequest(BaseModel):
    title: str
    body: str = ""
    icon: LogIcon = "note"


def _default_session() -> ExpeditionSession:
    settings = load_settings()
    return ExpeditionSession(
        ExpeditionEngine(settings=settings),
        log_store=open_file_store(settings.log_store_path, settings.log_store_key),
    )


def create_app(session: ExpeditionSession | None = None, background_ticks: bool = True) -> FastAPI:
    session = session or _default_session()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ticker = PeriodicTicker(session.tick, interval_ms=session.engine.settings.tick_interval_ms)
        app.state.ticker = ticker
        if background_ticks:
            ticker.start()
        try:
            yield
        finally:
            await ticker.stop()

    app = FastAPI(title="Zambezi Source Expedition", lifespan=lifespan)
    app.state.session = session

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/snapshot")
    def snapshot(include_alerts: bool = False) -> dict[str, Any]:
        current = session.snapshot()
        payload = current.to_dict()
        if include_alerts:
            payload["alerts"] = [
                {
                    "label": alert.label,
                    "category": alert.category,
                    "distance_km": alert.distance_km,
                    "time_ago": alert.time_ago,
                }
                for alert in session.engine.threat_alerts(current.position)
            ]
        return payload

    @app.post("/tick")
    def tick() -> dict[str, Any]:
        return session.tick().to_dict()

    @app.get("/logs")
    def list_logs() -> dict[str, list[dict[str, Any]]]:
        store = session.log_store
        entries = store.entries if store is not None else ()
        return {"logs": [entry.model_dump(mode="json", by_alias=True) for entry in entries]}

    @app.post("/logs")
    def create_log(request: LogCreateRequest) -> dict[str, dict[str, Any] | None]:
        entry = session.add_log(request.title, request.body, request.icon)
        return {"entry": entry.model_dump(mode="json", by_alias=True) if entry is not None else None}

    @app.get("/logs/{entry_id}")
    def get_log(entry_id: str) -> dict[str, Any]:
        entry = session.log_store.find_by_id(entry_id) if session.log_store is not None else None
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No log entry with id {entry_id}")
        return entry.model_dump(mode="json", by_alias=True)

    return app
