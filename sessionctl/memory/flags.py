"""sessionctl/memory/flags.py — Key-value stores and the first-run flag."""
from __future__ import annotations
import json
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from sessionctl.models.errors import StorageError, StoreCorruptionError
from sessionctl.models.types import utcnow

_SCHEMA = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous = NORMAL;

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kv_store (
    key        TEXT NOT NULL,
    namespace  TEXT NOT NULL DEFAULT 'default',
    value_json TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (key, namespace)
);
"""

_SCHEMA_VERSION = 1

FIRST_RUN_KEY = "TUTORIAL_FINISHED"
FIRST_RUN_DONE = "DONE"


# ── Interfaces ────────────────────────────────────────────────────────────────

class KeyValueStore(ABC):
    @abstractmethod
    def has(self, key: str) -> bool: ...
    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any: ...
    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...
    @abstractmethod
    def delete(self, key: str) -> None: ...

    def close(self) -> None:
        pass


# ── Implementations ───────────────────────────────────────────────────────────

class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def has(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteKeyValueStore(KeyValueStore):
    def __init__(self, db_path: str, namespace: str = "default") -> None:
        resolved = Path(db_path).expanduser()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        self._path = resolved
        self._namespace = namespace
        self._conn = sqlite3.connect(str(resolved), check_same_thread=True)
        self._conn.row_factory = sqlite3.Row
        self._apply_schema()
        self._run_integrity_check()

    def _apply_schema(self) -> None:
        try:
            self._conn.executescript(_SCHEMA)
            row = self._conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
            current = row[0] if row[0] is not None else 0
            if current < _SCHEMA_VERSION:
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_version (version, applied_at) VALUES (?,?)",
                    (_SCHEMA_VERSION, utcnow()))
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreCorruptionError(f"Schema apply failed for {self._path}: {e}") from e

    def _run_integrity_check(self) -> None:
        try:
            r = self._conn.execute("PRAGMA integrity_check").fetchone()
            if r[0] != "ok":
                raise StoreCorruptionError(f"SQLite integrity check failed: {r[0]}")
        except sqlite3.Error as e:
            raise StoreCorruptionError(f"Integrity check failed: {e}") from e

    def has(self, key: str) -> bool:
        try:
            row = self._conn.execute(
                "SELECT 1 FROM kv_store WHERE key=? AND namespace=?",
                (key, self._namespace)).fetchone()
            return row is not None
        except sqlite3.Error as e:
            raise StoreCorruptionError(f"has failed: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = self._conn.execute(
                "SELECT value_json FROM kv_store WHERE key=? AND namespace=?",
                (key, self._namespace)).fetchone()
            return json.loads(row["value_json"]) if row else default
        except sqlite3.Error as e:
            raise StoreCorruptionError(f"get failed: {e}") from e

    def set(self, key: str, value: Any) -> None:
        now = utcnow()
        try:
            with self._conn:
                row = self._conn.execute(
                    "SELECT created_at FROM kv_store WHERE key=? AND namespace=?",
                    (key, self._namespace)).fetchone()
                created = row["created_at"] if row else now
                self._conn.execute(
                    "INSERT OR REPLACE INTO kv_store "
                    "(key,namespace,value_json,created_at,updated_at) VALUES (?,?,?,?,?)",
                    (key, self._namespace, json.dumps(value), created, now))
        except sqlite3.Error as e:
            raise StorageError(f"set failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    "DELETE FROM kv_store WHERE key=? AND namespace=?",
                    (key, self._namespace))
        except sqlite3.Error as e:
            raise StorageError(f"delete failed: {e}") from e

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            pass


# ── First-run flag ────────────────────────────────────────────────────────────

class FirstRunFlags:
    """Tracks whether the guided variant has completed once."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def has_completed_first_run(self) -> bool:
        return self._store.has(FIRST_RUN_KEY)

    def mark_first_run_complete(self) -> None:
        self._store.set(FIRST_RUN_KEY, FIRST_RUN_DONE)

    def clear_first_run_flag(self) -> None:
        self._store.delete(FIRST_RUN_KEY)
