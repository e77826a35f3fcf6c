"""
Data-model field names and status vocabularies.

Field names are a closed enumeration so that a typo fails at the call site
instead of silently writing an unknown element to the host.
"""

from __future__ import annotations

from enum import Enum


class DataModelField(str, Enum):
    """Data-model elements the runtime reads or writes."""
    SCORE_RAW         = "cmi.score.raw"
    SCORE_MAX         = "cmi.score.max"
    SCORE_MIN         = "cmi.score.min"
    SCORE_SCALED      = "cmi.score.scaled"      # 0–1
    SUCCESS_STATUS    = "cmi.success_status"
    COMPLETION_STATUS = "cmi.completion_status"
    ENTRY             = "cmi.entry"
    MODE              = "cmi.mode"

    @classmethod
    def coerce(cls, name: "DataModelField | str") -> "DataModelField":
        """Return the member for *name*; raise ValueError for anything else."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown data-model field: {name!r}") from None


class CompletionStatus(str, Enum):
    COMPLETED     = "completed"
    INCOMPLETE    = "incomplete"
    NOT_ATTEMPTED = "not attempted"
    UNKNOWN       = "unknown"


class SuccessStatus(str, Enum):
    PASSED  = "passed"
    FAILED  = "failed"
    UNKNOWN = "unknown"


# The five elements written on every accepted quiz submission, in write order.
RESULT_FIELDS: tuple[DataModelField, ...] = (
    DataModelField.SCORE_RAW,
    DataModelField.SCORE_MAX,
    DataModelField.SCORE_SCALED,
    DataModelField.SUCCESS_STATUS,
    DataModelField.COMPLETION_STATUS,
)
