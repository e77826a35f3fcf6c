"""
storage.py — Local persistence for preview / standalone mode
============================================================
When no tracking API is discovered the runtime keeps media completion and
quiz results locally so a page reload in preview does not lose them.

Key convention
--------------
  <namespace>:<category>:<id>      e.g.  schorm:media:intro-video
                                          schorm:quiz:module-1-check

Backends
--------
  MemoryStore   dict-backed; optional byte quota (mirrors browser storage limits)
  SQLiteStore   single ``kv_store`` table; WAL journal; one connection per call

Persistence is best-effort: every public method catches backend and
serialisation failures, logs them, and returns None / False / {}.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StorageCategory(str, Enum):
    MEDIA = "media"
    QUIZ  = "quiz"


class StorageError(Exception):
    """Raised by a backend when a read or write cannot be served."""


class StorageQuotaExceeded(StorageError):
    pass


def storage_key(namespace: str, category: StorageCategory | str, item_id: str) -> str:
    """Build ``<namespace>:<category>:<id>``."""
    category = category.value if isinstance(category, StorageCategory) else category
    return f"{namespace}:{category}:{item_id}"


class LocalStore:
    """
    Base class.  Subclasses implement ``_read``, ``_write`` and ``_scan``;
    the public methods here add the never-raise contract.
    """

    def load(self, key: str) -> Optional[str]:
        try:
            return self._read(key)
        except (StorageError, sqlite3.Error, OSError) as exc:
            logger.warning("Failed to load %s: %s", key, exc)
            return None

    def save(self, key: str, value: str) -> bool:
        try:
            self._write(key, value)
            return True
        except (StorageError, sqlite3.Error, OSError) as exc:
            logger.warning("Failed to save %s: %s", key, exc)
            return False

    def items(self, prefix: str = "") -> dict[str, str]:
        """Return every stored key/value whose key starts with *prefix*."""
        try:
            return self._scan(prefix)
        except (StorageError, sqlite3.Error, OSError) as exc:
            logger.warning("Failed to scan %s*: %s", prefix, exc)
            return {}

    def load_json(self, key: str) -> Any:
        raw = self.load(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("Stored value for %s is not valid JSON: %s", key, exc)
            return None

    def save_json(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value, sort_keys=True)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not serialise value for %s: %s", key, exc)
            return False
        return self.save(key, payload)

    # ── Backend hooks ────────────────────────────────────────────────────────

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _scan(self, prefix: str) -> dict[str, str]:
        raise NotImplementedError


# ─── In-memory backend ───────────────────────────────────────────────────────

def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


class MemoryStore(LocalStore):
    """Dict-backed store.  ``max_bytes`` caps the UTF-8 encoded size of keys + values."""

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._data: dict[str, str] = {}
        self.max_bytes = max_bytes

    def _used_bytes(self, excluding: str = "") -> int:
        return sum(_utf8_len(k) + _utf8_len(v) for k, v in self._data.items() if k != excluding)

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"values must be str, got {type(value).__name__}")
        if self.max_bytes is not None:
            needed = self._used_bytes(excluding=key) + _utf8_len(key) + _utf8_len(value)
            if needed > self.max_bytes:
                raise StorageQuotaExceeded(
                    f"quota of {self.max_bytes} bytes exceeded ({needed} needed)"
                )
        self._data[key] = value

    def _scan(self, prefix: str) -> dict[str, str]:
        return {k: v for k, v in self._data.items() if k.startswith(prefix)}


# ─── SQLite backend ──────────────────────────────────────────────────────────

class SQLiteStore(LocalStore):
    """Key/value rows in one table; the file is created on first use."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self._ready = False

    def _get_conn(self) -> sqlite3.Connection:
        """Return a connection with the table in place."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        if not self._ready:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key         TEXT PRIMARY KEY,
                value       TEXT NOT NULL,
                updated_at  TEXT DEFAULT (datetime('now'))
            );
            """)
            conn.commit()
            self._ready = True
        return conn

    def _read(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return None if row is None else row["value"]

    def _write(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("""
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = datetime('now')
            """, (key, value))
            conn.commit()
        finally:
            conn.close()

    def _scan(self, prefix: str) -> dict[str, str]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT key, value FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        finally:
            conn.close()
        return {r["key"]: r["value"] for r in rows}


def store_from_settings(settings) -> LocalStore:
    """Build the backend named by ``settings.storage``."""
    if settings.storage.uses_sqlite:
        return SQLiteStore(settings.storage.sqlite_path)
    return MemoryStore()
