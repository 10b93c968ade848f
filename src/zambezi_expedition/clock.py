from __future__ import annotations

import asyncio
import logging
from typing import Callable

from zambezi_expedition.config import SETTINGS
from zambezi_expedition.models import ProgressState

logger = logging.getLogger(__name__)


def advance(state: ProgressState, step: float = SETTINGS.progress_step) -> ProgressState:
    """Move one tick forward. Progress loops back to the route start past 1."""
    next_progress = state.progress_fraction + step
    # Landing exactly on 1.0 shows the route start; progress stays in [0, 1).
    if next_progress >= 1.0:
        next_progress -= 1.0
    return ProgressState(progress_fraction=next_progress, tick=state.tick + 1)


class PeriodicTicker:
    """Calls `on_tick` every `interval_ms` on the running event loop.

    Ticks missed while the loop was busy are dropped, never replayed.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        interval_ms: int = SETTINGS.tick_interval_ms,
        max_ticks: int | None = None,
    ) -> None:
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self.max_ticks = max_ticks
        self.fired = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        while self.max_ticks is None or self.fired < self.max_ticks:
            await asyncio.sleep(self.interval_ms / 1000)
            self.on_tick()
            self.fired += 1

    def start(self) -> asyncio.Task[None]:
        if self.running:
            raise RuntimeError("Ticker already running")
        self._task = asyncio.get_running_loop().create_task(self.run())
        logger.info("Ticker started (interval=%sms)", self.interval_ms)
        return self._task

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Ticker stopped after %s ticks", self.fired)
