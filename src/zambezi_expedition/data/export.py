"""Run the engine offline and write the telemetry trace to CSV."""

from __future__ import annotations

import argparse
import csv
import random
from pathlib import Path

from zambezi_expedition.data.contract import TELEMETRY_COLUMNS
from zambezi_expedition.engine import ExpeditionEngine
from zambezi_expedition.models import TelemetrySnapshot


def snapshot_row(snapshot: TelemetrySnapshot) -> dict[str, object]:
    return {
        "tick": snapshot.tick,
        "progress_fraction": round(snapshot.progress_fraction, 4),
        "lat": round(snapshot.position.lat, 6),
        "lng": round(snapshot.position.lng, 6),
        "distance_km": snapshot.distance_km,
        "heart_rate": snapshot.heart_rate,
        "ph": snapshot.ph,
        "turbidity": snapshot.turbidity,
        "water_temp": snapshot.water_temp,
        "nearest_threat_km": snapshot.nearest_threat_km,
        "last_updated": snapshot.last_updated,
    }


def _write_csv(path: Path, rows: list[dict[str, object]], fieldnames: list[str]) -> None:
    # Mode "w" overwrites the previous run.
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def export_telemetry(out_path: Path, ticks: int = 60, seed: int | None = None, engine: ExpeditionEngine | None = None) -> Path:
    """Write the initial snapshot plus `ticks` advanced snapshots."""
    if ticks < 0:
        raise ValueError(f"ticks must be >= 0, got {ticks}")
    engine = engine or ExpeditionEngine(rng=random.Random(seed))
    state = engine.initial_state()
    rows = [snapshot_row(state.snapshot)]
    for _ in range(ticks):
        state = engine.step(state)
        rows.append(snapshot_row(state.snapshot))
    _write_csv(out_path, rows, TELEMETRY_COLUMNS)
    return out_path


def non_negative_int(value: str) -> int:
    """argparse type for tick counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def main() -> None:
    parser = argparse.ArgumentParser(description="Export a simulated telemetry trace.")
    parser.add_argument("--out", default="outputs/telemetry.csv", help="Output CSV path")
    parser.add_argument("--ticks", type=non_negative_int, default=60, help="Number of ticks to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the signal jitter")
    args = parser.parse_args()

    print(export_telemetry(Path(args.out), ticks=args.ticks, seed=args.seed))


if __name__ == "__main__":
    main()
