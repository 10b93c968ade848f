import math
import random
from typing import Sequence

from zambezi_expedition.geo import nearest_distance
from zambezi_expedition.models import GeoPoint, TelemetrySample, ThreatMarker


def heart_rate(tick: int, rng: random.Random) -> int:
    """Team heart rate in bpm, within [106, 134]."""
    return round(120 + 10 * math.sin(tick / 3) + rng.uniform(-4, 4))


def water_ph(tick: int, rng: random.Random) -> float:
    return round(7 + 0.35 * math.sin(tick / 5) + rng.uniform(-0.05, 0.05), 2)


def turbidity(tick: int, rng: random.Random) -> float:
    """Water turbidity in NTU, never below 0.8."""
    return max(0.8, round(3.5 + 0.8 * math.sin(tick / 4) + rng.uniform(-0.3, 0.3), 2))


def water_temp(tick: int, rng: random.Random) -> float:
    return round(18.5 + 1.8 * math.sin(tick / 6) + rng.uniform(-0.2, 0.2), 1)


def nearest_threat_km(position: GeoPoint, markers: Sequence[ThreatMarker]) -> float:
    return round(nearest_distance(position, markers), 1)


def generate_sample(tick: int, rng: random.Random) -> TelemetrySample:
    # Draw order is fixed so a seeded rng reproduces the same sample.
    return TelemetrySample(
        tick=tick,
        heart_rate=heart_rate(tick, rng),
        ph=water_ph(tick, rng),
        turbidity=turbidity(tick, rng),
        water_temp=water_temp(tick, rng),
    )
