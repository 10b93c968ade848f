from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from zambezi_expedition.config import SETTINGS
from zambezi_expedition.models import TelemetrySample


@dataclass(frozen=True, slots=True)
class TelemetryHistory:
    """Rolling window of the most recent samples, oldest first."""

    samples: tuple[TelemetrySample, ...] = ()
    capacity: int = SETTINGS.history_capacity

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"History capacity must be positive, got {self.capacity}")
        if len(self.samples) > self.capacity:
            object.__setattr__(self, "samples", self.samples[-self.capacity :])

    def append(self, sample: TelemetrySample) -> TelemetryHistory:
        return TelemetryHistory(samples=(*self.samples, sample)[-self.capacity :], capacity=self.capacity)

    def latest(self) -> TelemetrySample | None:
        return self.samples[-1] if self.samples else None

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[TelemetrySample]:
        return iter(self.samples)
