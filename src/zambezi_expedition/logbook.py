"""Expedition log entries and their key-value persistence."""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Protocol, Sequence
from uuid import uuid4

from pydantic import TypeAdapter

from zambezi_expedition.config import SETTINGS
from zambezi_expedition.models import LOG_ICONS, ExpeditionLogEntry, GeoPoint, LogIcon

logger = logging.getLogger(__name__)

_ENTRIES_ADAPTER = TypeAdapter(list[ExpeditionLogEntry])


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileKeyValueStore:
    """Key -> string payload mapping kept in one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except ValueError:
            logger.warning("Overwriting unreadable store file %s", self.path)
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class LogStorage(Protocol):
    def load(self) -> list[ExpeditionLogEntry]: ...

    def save(self, entries: Sequence[ExpeditionLogEntry]) -> None: ...


class KeyValueLogStorage:
    """Stores the whole entry list as one JSON record under a fixed key."""

    def __init__(self, kv: KeyValueStore, key: str = SETTINGS.log_store_key) -> None:
        self.kv = kv
        self.key = key

    def load(self) -> list[ExpeditionLogEntry]:
        payload = self.kv.get(self.key)
        if payload is None:
            return []
        return _ENTRIES_ADAPTER.validate_json(payload)

    def save(self, entries: Sequence[ExpeditionLogEntry]) -> None:
        payload = _ENTRIES_ADAPTER.dump_json(list(entries), by_alias=True).decode("utf-8")
        self.kv.set(self.key, payload)


def _timestamp_id() -> str:
    return str(time.time_ns() // 1_000_000)


def _new_entry_id() -> str:
    try:
        return str(uuid4())
    except NotImplementedError:
        # os.urandom has no entropy source on this platform.
        return _timestamp_id()


class ExpeditionLogStore:
    """Newest-first collection of log entries, rewritten in full on every change.

    `create` re-reads storage before writing so stores sharing one medium
    (several dashboard sessions on one file) do not drop each other's entries.
    """

    def __init__(
        self,
        storage: LogStorage,
        id_factory: Callable[[], str] = _new_entry_id,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        self.storage = storage
        self.id_factory = id_factory
        self.clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._entries: list[ExpeditionLogEntry] = []
        self._lock = threading.Lock()

    @property
    def entries(self) -> tuple[ExpeditionLogEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _read_storage(self) -> list[ExpeditionLogEntry]:
        try:
            return list(self.storage.load())
        except ValueError as exc:
            # Covers pydantic ValidationError and json.JSONDecodeError.
            logger.error("Failed to parse stored logs, starting empty: %s", exc, exc_info=True)
            return []

    def load_all(self) -> list[ExpeditionLogEntry]:
        with self._lock:
            self._entries = self._read_storage()
            logger.info("Loaded %s expedition log entries", len(self._entries))
            return list(self._entries)

    def persist_all(self) -> None:
        with self._lock:
            self.storage.save(self._entries)

    def _unique_id(self) -> str:
        candidate = self.id_factory()
        taken = {entry.id for entry in self._entries}
        suffix = 1
        unique = candidate
        while unique in taken:
            unique = f"{candidate}-{suffix}"
            suffix += 1
        return unique

    def create(self, title: str, body: str, icon: LogIcon, position: GeoPoint) -> ExpeditionLogEntry | None:
        if not title.strip():
            logger.debug("Ignoring log entry with empty title")
            return None
        if icon not in LOG_ICONS:
            raise ValueError(f"Unknown log icon: {icon!r}")

        with self._lock:
            self._entries = self._read_storage()
            entry = ExpeditionLogEntry(
                id=self._unique_id(),
                title=title.strip(),
                body=body.strip(),
                icon=icon,
                created_at=self.clock_ms(),
                position=position,
            )
            self._entries.insert(0, entry)
            self.storage.save(self._entries)
        logger.info(
            "Created log entry id=%s icon=%s at lat=%.4f lng=%.4f",
            entry.id,
            entry.icon,
            position.lat,
            position.lng,
        )
        return entry

    def find_by_id(self, entry_id: str) -> ExpeditionLogEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None


def open_file_store(path: Path | None = None, key: str = SETTINGS.log_store_key) -> ExpeditionLogStore:
    """Log store backed by the local JSON key-value file, already loaded."""
    store = ExpeditionLogStore(KeyValueLogStorage(JsonFileKeyValueStore(path or SETTINGS.log_store_path), key))
    store.load_all()
    return store
