from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ThreatCategory = Literal["deforestation", "fire", "logging"]
LogIcon = Literal["note", "observation", "alert"]

THREAT_CATEGORIES: tuple[str, ...] = ("deforestation", "fire", "logging")
LOG_ICONS: tuple[str, ...] = ("note", "observation", "alert")


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class ThreatMarker:
    position: GeoPoint
    label: str
    category: ThreatCategory


@dataclass(frozen=True, slots=True)
class RouteData:
    """Static reference data for one expedition route."""

    route: tuple[GeoPoint, ...]
    threat_markers: tuple[ThreatMarker, ...] = ()
    wetlands: tuple[tuple[GeoPoint, ...], ...] = ()
    corridor: tuple[GeoPoint, ...] = ()
    name: str = "Zambezi source"


@dataclass(frozen=True, slots=True)
class ProgressState:
    progress_fraction: float = 0.0
    tick: int = 0


@dataclass(frozen=True, slots=True)
class TelemetrySample:
    tick: int
    heart_rate: float
    ph: float
    turbidity: float | None = None
    water_temp: float | None = None


@dataclass(frozen=True, slots=True)
class ThreatAlert:
    label: str
    category: ThreatCategory
    position: GeoPoint
    distance_km: float
    time_ago: str


@dataclass(frozen=True, slots=True)
class TelemetrySnapshot:
    tick: int
    progress_fraction: float
    position: GeoPoint
    distance_km: float
    heart_rate: float
    ph: float
    turbidity: float
    water_temp: float
    nearest_threat_km: float
    last_updated: str
    history: tuple[TelemetrySample, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["history"] = [asdict(sample) for sample in self.history]
        return payload


class ExpeditionLogEntry(BaseModel):
    """A user annotation pinned to the expedition position at creation time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    body: str = ""
    icon: LogIcon = "note"
    created_at: int = Field(..., alias="createdAt", description="Unix epoch milliseconds")
    position: GeoPoint
