"""Schema contract for exported telemetry runs."""

from __future__ import annotations

# One row per tick.
TELEMETRY_COLUMNS = [
    "tick",  # Monotonic tick counter.
    "progress_fraction",  # Normalized route progress in [0, 1).
    "lat",  # Expedition latitude in decimal degrees.
    "lng",  # Expedition longitude in decimal degrees.
    "distance_km",  # Path distance from the route start.
    "heart_rate",  # Team heart rate in bpm.
    "ph",  # Water pH.
    "turbidity",  # Water turbidity in NTU.
    "water_temp",  # Water temperature in degrees Celsius.
    "nearest_threat_km",  # Distance to the closest threat marker.
    "last_updated",  # Wall-clock time the snapshot was published.
]

# Human-readable schema dictionary for docs and UI tooltips.
COLUMN_DESCRIPTIONS = {
    "tick": "Tick counter, incremented once per clock interval.",
    "progress_fraction": "Fraction of the route covered in the current loop, 0 to 1.",
    "lat": "Latitude of the interpolated expedition position.",
    "lng": "Longitude of the interpolated expedition position.",
    "distance_km": "Great-circle path length from the route start, rounded to 0.1 km.",
    "heart_rate": "Synthetic team heart rate in beats per minute.",
    "ph": "Synthetic river water pH.",
    "turbidity": "Synthetic river water turbidity in NTU.",
    "water_temp": "Synthetic river water temperature in degrees Celsius.",
    "nearest_threat_km": "Distance to the nearest deforestation, fire, or logging marker.",
    "last_updated": "Local time the snapshot was produced.",
}
