import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SimulationSettings:
    tick_interval_ms: int = 2000
    progress_step: float = 0.055
    history_capacity: int = 30
    earth_radius_km: float = 6371.0
    min_segment_km: float = 0.0001
    log_store_key: str = "zambezi-expedition-logs"
    log_store_path: Path = Path("data") / "expedition_store.json"
    log_dir: Path = Path("logs")


SETTINGS = SimulationSettings()


def load_settings() -> SimulationSettings:
    """Return SETTINGS with environment overrides applied."""
    overrides: dict[str, object] = {}
    store_path = os.getenv("ZAMBEZI_LOG_STORE_PATH")
    if store_path:
        overrides["log_store_path"] = Path(store_path)
    log_dir = os.getenv("ZAMBEZI_LOG_DIR")
    if log_dir:
        overrides["log_dir"] = Path(log_dir)
    interval = os.getenv("ZAMBEZI_TICK_INTERVAL_MS")
    if interval:
        try:
            interval_ms = int(interval)
        except ValueError:
            raise ValueError(f"ZAMBEZI_TICK_INTERVAL_MS must be an integer, got {interval!r}") from None
        if interval_ms < 0:
            raise ValueError(f"ZAMBEZI_TICK_INTERVAL_MS must be >= 0, got {interval_ms}")
        overrides["tick_interval_ms"] = interval_ms
    return replace(SETTINGS, **overrides)


def setup_file_logging(log_dir: Path | None = None, level: int = logging.INFO) -> Path:
    """Attach a daily FileHandler to the package logger. Safe to call repeatedly."""
    target_dir = log_dir if log_dir is not None else SETTINGS.log_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / f"expedition_{datetime.now().strftime('%Y%m%d')}.log"

    logger = logging.getLogger("zambezi_expedition")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.FileHandler(log_file)
        handler.setLevel(level)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return log_file
