from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

from zambezi_expedition.clock import advance
from zambezi_expedition.config import SETTINGS, SimulationSettings
from zambezi_expedition.geo import build_cumulative_table, haversine_km, interpolate, total_distance
from zambezi_expedition.history import TelemetryHistory
from zambezi_expedition.logbook import ExpeditionLogStore
from zambezi_expedition.models import (
    ExpeditionLogEntry,
    GeoPoint,
    LogIcon,
    ProgressState,
    RouteData,
    TelemetrySnapshot,
    ThreatAlert,
)
from zambezi_expedition.signals import generate_sample, nearest_threat_km
from zambezi_expedition.simulator import default_route_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineState:
    progress: ProgressState
    history: TelemetryHistory
    snapshot: TelemetrySnapshot | None = None


class ExpeditionEngine:
    """Pure tick pipeline: progress -> position -> metrics -> history -> snapshot."""

    def __init__(
        self,
        route_data: RouteData | None = None,
        rng: random.Random | None = None,
        settings: SimulationSettings = SETTINGS,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.route_data = route_data or default_route_data()
        if not self.route_data.route:
            raise ValueError("Route must contain at least one point")
        self.settings = settings
        self.rng = rng or random.Random()
        self.now = now or datetime.now
        self.cumulative = build_cumulative_table(self.route_data.route, settings.earth_radius_km)
        self.total_distance_km = total_distance(self.cumulative)

    def position_at(self, progress_fraction: float) -> tuple[GeoPoint, float]:
        """Return (position, distance_km) for a progress fraction."""
        target_km = self.total_distance_km * progress_fraction
        position = interpolate(
            self.route_data.route,
            self.cumulative,
            target_km,
            min_segment_km=self.settings.min_segment_km,
        )
        return position, target_km

    def initial_state(self) -> EngineState:
        state = EngineState(
            progress=ProgressState(),
            history=TelemetryHistory(capacity=self.settings.history_capacity),
        )
        return self._publish(state)

    def step(self, state: EngineState) -> EngineState:
        return self._publish(replace(state, progress=advance(state.progress, self.settings.progress_step)))

    def _publish(self, state: EngineState) -> EngineState:
        # Everything in one snapshot derives from the same progress state.
        progress = state.progress
        position, distance_km = self.position_at(progress.progress_fraction)
        sample = generate_sample(progress.tick, self.rng)
        history = state.history.append(sample)
        snapshot = TelemetrySnapshot(
            tick=progress.tick,
            progress_fraction=progress.progress_fraction,
            position=position,
            distance_km=round(distance_km, 1),
            heart_rate=sample.heart_rate,
            ph=sample.ph,
            turbidity=sample.turbidity,
            water_temp=sample.water_temp,
            nearest_threat_km=nearest_threat_km(position, self.route_data.threat_markers),
            last_updated=self.now().isoformat(timespec="seconds"),
            history=history.samples,
        )
        logger.debug(
            "tick=%s progress=%.3f distance_km=%.1f hr=%s ph=%s",
            progress.tick,
            progress.progress_fraction,
            snapshot.distance_km,
            snapshot.heart_rate,
            snapshot.ph,
        )
        return EngineState(progress=progress, history=history, snapshot=snapshot)

    def threat_alerts(self, position: GeoPoint) -> list[ThreatAlert]:
        """Threat markers with their distance from position, in reference order."""
        return [
            ThreatAlert(
                label=marker.label,
                category=marker.category,
                position=marker.position,
                distance_km=round(haversine_km(position, marker.position, self.settings.earth_radius_km), 1),
                time_ago=f"{5 + idx * 3} min ago",
            )
            for idx, marker in enumerate(self.route_data.threat_markers)
        ]


class ExpeditionSession:
    """Mutable holder for one running expedition.

    Ticks and reads may come from different threads (e.g. FastAPI's worker
    pool), so state swaps happen under a lock.
    """

    def __init__(self, engine: ExpeditionEngine, log_store: ExpeditionLogStore | None = None) -> None:
        self.engine = engine
        self.log_store = log_store
        self._lock = threading.Lock()
        self._state = engine.initial_state()

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    def snapshot(self) -> TelemetrySnapshot:
        snapshot = self.state.snapshot
        if snapshot is None:
            raise RuntimeError("Session has no published snapshot")
        return snapshot

    def tick(self) -> TelemetrySnapshot:
        with self._lock:
            self._state = self.engine.step(self._state)
            snapshot = self._state.snapshot
        if snapshot is None:
            raise RuntimeError("Engine step did not publish a snapshot")
        return snapshot

    def add_log(self, title: str, body: str = "", icon: LogIcon = "note") -> ExpeditionLogEntry | None:
        if self.log_store is None:
            raise RuntimeError("Session has no log store attached")
        return self.log_store.create(title, body, icon, self.snapshot().position)
