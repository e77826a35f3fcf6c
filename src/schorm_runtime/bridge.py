"""
bridge.py — Non-throwing wrapper over the host tracking API
===========================================================
Every call that crosses into the host goes through ``DataModelBridge``.
A misbehaving host must never crash content, so:

  • exceptions raised by the handle are caught and logged
  • falsy / "false" returns are treated as failure and logged
  • the caller only ever sees ``bool`` (writes) or ``str | None`` (reads)

Without a handle (preview / standalone mode) reads return ``None`` and
writes, commit, initialize and terminate succeed as no-ops.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from schorm_runtime.fields import DataModelField

logger = logging.getLogger(__name__)


@runtime_checkable
class TrackingHandle(Protocol):
    """Host-provided tracking API.  Returns may be bool or "true"/"false"."""

    def initialize(self) -> Any: ...
    def terminate(self) -> Any: ...
    def get_value(self, name: str) -> Optional[str]: ...
    def set_value(self, name: str, value: str) -> Any: ...
    def commit(self) -> Any: ...


def _succeeded(value: Any) -> bool:
    """Hosts answer with True/False or the strings "true"/"false"."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.7g}"
    return str(getattr(value, "value", value))


class DataModelBridge:
    """
    Typed, failure-tolerant access to the tracking API.

    Usage::

        bridge = DataModelBridge(handle)          # handle may be None
        bridge.initialize()
        bridge.set_value(DataModelField.SCORE_RAW, 3)
        bridge.commit()
        bridge.terminate()
    """

    def __init__(self, handle: Any = None) -> None:
        self._handle = handle
        self._init_result: Optional[bool] = None
        self._term_result: Optional[bool] = None

    @property
    def has_handle(self) -> bool:
        return self._handle is not None

    @property
    def initialized(self) -> bool:
        return bool(self._init_result)

    @property
    def terminated(self) -> bool:
        return self._term_result is not None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def initialize(self) -> bool:
        """Open the host session once; later calls return the first outcome."""
        if self._init_result is None:
            self._init_result = self._call("initialize") if self.has_handle else True
        return self._init_result

    def terminate(self) -> bool:
        """Close the host session once; later calls return the first outcome."""
        if self._term_result is None:
            self._term_result = self._call("terminate") if self.has_handle else True
        return self._term_result

    # ── Data exchange ────────────────────────────────────────────────────────

    def get_value(self, field: DataModelField | str) -> Optional[str]:
        name = DataModelField.coerce(field).value
        if not self.has_handle:
            return None
        try:
            value = self._handle.get_value(name)
        except Exception as exc:
            logger.warning("get_value(%s) raised: %s", name, exc)
            return None
        return None if value is None else str(value)

    def set_value(self, field: DataModelField | str, value: Any) -> bool:
        name = DataModelField.coerce(field).value
        if not self.has_handle:
            logger.debug("No tracking API; set_value(%s) skipped", name)
            return True
        return self._call("set_value", name, _format_value(value))

    def commit(self) -> bool:
        if not self.has_handle:
            return True
        return self._call("commit")

    # ── Internal ─────────────────────────────────────────────────────────────

    def _call(self, method: str, *args: Any) -> bool:
        try:
            result = getattr(self._handle, method)(*args)
        except Exception as exc:
            logger.warning("Tracking API %s%r raised: %s", method, args, exc)
            return False
        if not _succeeded(result):
            logger.warning(
                "Tracking API %s%r failed (error %s)", method, args, self._last_error()
            )
            return False
        return True

    def _last_error(self) -> str:
        getter = getattr(self._handle, "get_last_error", None)
        if getter is None:
            return "n/a"
        try:
            return str(getter())
        except Exception:
            return "n/a"
