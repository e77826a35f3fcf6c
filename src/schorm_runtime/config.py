"""
config.py — Central settings for the schorm runtime
===================================================
All configuration is loaded from environment variables / .env file.

Preview mode activates automatically when no tracking API is discovered;
SCHORM_FORCE_PREVIEW=true forces it even when the host exposes one.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)

DEFAULT_NAMESPACE = "schorm"
DEFAULT_DISCOVERY_DEPTH = 7


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── Runtime behaviour ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class RuntimeConfig:
    namespace:           str    # key prefix for local persistence
    discovery_max_depth: int    # context hops searched for the tracking API
    force_preview_mode:  bool


# ─── Local persistence ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class StorageConfig:
    backend:     str   # "memory" | "sqlite"
    sqlite_path: str

    @property
    def uses_sqlite(self) -> bool:
        return self.backend == "sqlite" and not _is_placeholder(self.sqlite_path)


# ─── Logging ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LoggingConfig:
    level: str

    @property
    def level_no(self) -> int:
        level = self.level.upper()
        if level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return getattr(logging, level)
        return logging.WARNING


# ─── Master settings object ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    runtime: RuntimeConfig
    storage: StorageConfig
    logging: LoggingConfig

    def status_summary(self) -> dict[str, str]:
        """Return a dict of setting → human-readable value for debug output."""
        return {
            "Namespace":        self.runtime.namespace,
            "Discovery depth":  str(self.runtime.discovery_max_depth),
            "Forced preview":   "yes" if self.runtime.force_preview_mode else "no",
            "Storage":          "SQLite" if self.storage.uses_sqlite else "In-memory",
            "Log level":        self.logging.level.upper(),
        }


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str  = lambda k, d="": os.getenv(k, d).strip()
    _int  = lambda k, d=0: int(os.getenv(k, str(d)) or d)
    _bool = lambda k, d=False: os.getenv(k, str(d)).lower() in ("1", "true", "yes")

    depth = _int("SCHORM_DISCOVERY_DEPTH", DEFAULT_DISCOVERY_DEPTH)
    return Settings(
        runtime=RuntimeConfig(
            namespace           = _str("SCHORM_NAMESPACE", DEFAULT_NAMESPACE) or DEFAULT_NAMESPACE,
            discovery_max_depth = depth if depth >= 0 else DEFAULT_DISCOVERY_DEPTH,
            force_preview_mode  = _bool("SCHORM_FORCE_PREVIEW", False),
        ),
        storage=StorageConfig(
            backend     = _str("SCHORM_STORAGE", "memory").lower(),
            sqlite_path = _str("SCHORM_SQLITE_PATH", "schorm_preview.db"),
        ),
        logging=LoggingConfig(
            level = _str("SCHORM_LOG_LEVEL", "WARNING"),
        ),
    )


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger (idempotent)."""
    settings = settings or get_settings()
    logger = logging.getLogger("schorm_runtime")
    logger.setLevel(settings.logging.level_no)
    if not any(getattr(h, "_schorm_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s | %(message)s"))
        handler._schorm_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
