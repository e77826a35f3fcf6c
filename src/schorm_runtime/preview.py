"""
preview.py — In-process stand-in for the host tracking API
==========================================================
Used when content is opened in the local preview: exposes the same five
operations as a real host, answers with the host string convention
("true"/"false"), logs every call, and keeps what was written so it can
be inspected afterwards.
"""

from __future__ import annotations

import logging
from typing import Optional

from schorm_runtime.fields import CompletionStatus, DataModelField, SuccessStatus

logger = logging.getLogger(__name__)

_DEFAULTS: dict[str, str] = {
    DataModelField.COMPLETION_STATUS.value: CompletionStatus.UNKNOWN.value,
    DataModelField.SUCCESS_STATUS.value:    SuccessStatus.UNKNOWN.value,
    DataModelField.ENTRY.value:             "ab-initio",
    DataModelField.MODE.value:              "normal",
}


class PreviewTrackingHandle:
    """Records calls and values; never talks to anything outside the process."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.commits = 0
        self.active = False

    def _log(self, method: str, *args) -> None:
        self.calls.append((method, args))
        logger.info("[preview API] %s%r", method, args)

    def initialize(self, parameter: str = "") -> str:
        self._log("initialize", parameter)
        self.active = True
        return "true"

    def terminate(self, parameter: str = "") -> str:
        self._log("terminate", parameter)
        self.active = False
        return "true"

    def get_value(self, name: str) -> Optional[str]:
        self._log("get_value", name)
        return self.values.get(name, _DEFAULTS.get(name, ""))

    def set_value(self, name: str, value: str) -> str:
        self._log("set_value", name, value)
        self.values[name] = value
        return "true"

    def commit(self, parameter: str = "") -> str:
        self._log("commit", parameter)
        self.commits += 1
        return "true"

    def get_last_error(self) -> str:
        return "0"
