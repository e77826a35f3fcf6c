"""
assessment.py — One-shot quiz submission
========================================
``QuizAttempt`` owns one quiz instance on a page and accepts exactly one
submission.

---------------------------------------------------------------------------
Submission flow
---------------------------------------------------------------------------
  submit(answers)
    ├─ state == SUBMITTED          → ALREADY_SUBMITTED (cached result, no side effects)
    ├─ check_answers_complete fails → INCOMPLETE (missing ids, no side effects)
    └─ accepted:
         evaluate_quiz → AttemptResult
         → bridge.set_value × 5 (raw, max, scaled, success, completion)
         → bridge.commit()
         → state = SUBMITTED   (whether or not the host accepted the writes)
         → preview mode: store.save_json("<ns>:quiz:<quizId>", result)

Delivery to the host is best-effort; the scoring side effect happens at
most once per attempt.

---------------------------------------------------------------------------
Data models defined in this file
---------------------------------------------------------------------------
  SubmissionState    not_submitted | submitted
  SubmissionStatus   accepted | incomplete | already_submitted
  AttemptResult      immutable scored outcome of one accepted submission
  SubmissionOutcome  what submit() hands back to the page
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional

from schorm_runtime.fields import CompletionStatus, DataModelField, SuccessStatus
from schorm_runtime.quiz_model import QuizSpec
from schorm_runtime.scoring import QuestionEvaluation, check_answers_complete, evaluate_quiz
from schorm_runtime.storage import StorageCategory

if TYPE_CHECKING:
    from schorm_runtime.session import RuntimeSession

logger = logging.getLogger(__name__)


# ─── Enumerations ────────────────────────────────────────────────────────────

class SubmissionState(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    SUBMITTED     = "submitted"


class SubmissionStatus(str, Enum):
    ACCEPTED          = "accepted"
    INCOMPLETE        = "incomplete"          # user must finish answering
    ALREADY_SUBMITTED = "already_submitted"


# ─── Data models ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AttemptResult:
    """Scored outcome of one accepted submission.  Never mutated."""
    quiz_id:   str
    raw:       float
    max:       float
    scaled:    float                 # clamped to [0, 1]
    passed:    bool
    timestamp: str                   # ISO-8601, UTC
    questions: tuple[QuestionEvaluation, ...] = field(default_factory=tuple)

    @property
    def success_status(self) -> SuccessStatus:
        return SuccessStatus.PASSED if self.passed else SuccessStatus.FAILED

    @property
    def percent(self) -> int:
        return round(self.scaled * 100)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["questions"] = [asdict(q) for q in self.questions]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttemptResult":
        return cls(
            quiz_id   = str(data["quiz_id"]),
            raw       = float(data["raw"]),
            max       = float(data["max"]),
            scaled    = float(data["scaled"]),
            passed    = bool(data["passed"]),
            timestamp = str(data["timestamp"]),
            questions = tuple(
                QuestionEvaluation(
                    question_id   = str(q["question_id"]),
                    correct       = bool(q["correct"]),
                    points_earned = float(q["points_earned"]),
                )
                for q in data.get("questions", [])
            ),
        )


@dataclass(frozen=True)
class SubmissionOutcome:
    status:    SubmissionStatus
    result:    Optional[AttemptResult] = None
    missing:   tuple[str, ...] = ()      # question ids still unanswered
    delivered: bool = False              # host accepted every write + commit

    @property
    def accepted(self) -> bool:
        return self.status == SubmissionStatus.ACCEPTED

    @property
    def message(self) -> str:
        if self.status == SubmissionStatus.INCOMPLETE:
            return "Please answer all questions before submitting."
        if self.status == SubmissionStatus.ALREADY_SUBMITTED:
            return "This quiz has already been submitted."
        verdict = "Passed" if self.result and self.result.passed else "Failed"
        pct = self.result.percent if self.result else 0
        return f"{verdict} ({pct}%)"


# ─── Engine ──────────────────────────────────────────────────────────────────

class QuizAttempt:
    """
    One quiz instance on one page.

    Usage::

        attempt = session.quiz(QuizSpec.from_json(embedded_json))
        outcome = attempt.submit(collected_answers)
        if outcome.status is SubmissionStatus.INCOMPLETE:
            ...  # ask the learner to finish
    """

    def __init__(self, session: "RuntimeSession", quiz: QuizSpec) -> None:
        self._session = session
        self.quiz = quiz
        self._state = SubmissionState.NOT_SUBMITTED
        self._result: Optional[AttemptResult] = None

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def submitted(self) -> bool:
        return self._state == SubmissionState.SUBMITTED

    @property
    def result(self) -> Optional[AttemptResult]:
        return self._result

    def check_answers(self, answers: Mapping[str, Any]):
        return check_answers_complete(self.quiz, answers)

    def submit(self, answers: Mapping[str, Any]) -> SubmissionOutcome:
        """Score and report once; see module docstring for the full flow."""
        if self.submitted:
            logger.info("Quiz %s already submitted; ignoring resubmission", self.quiz.id)
            return SubmissionOutcome(SubmissionStatus.ALREADY_SUBMITTED, result=self._result)

        report = check_answers_complete(self.quiz, answers)
        if not report.complete:
            logger.info("Quiz %s incomplete: %s", self.quiz.id, ", ".join(report.missing))
            return SubmissionOutcome(SubmissionStatus.INCOMPLETE, missing=report.missing)

        evaluation = evaluate_quiz(self.quiz, answers)
        result = AttemptResult(
            quiz_id   = self.quiz.id,
            raw       = evaluation.raw,
            max       = evaluation.max,
            scaled    = evaluation.scaled,
            passed    = evaluation.passed,
            timestamp = self._session.clock().isoformat(),
            questions = evaluation.questions,
        )
        self._result = result

        delivered = self._report(result)
        self._state = SubmissionState.SUBMITTED

        if self._session.is_preview_mode:
            logger.info(
                "schorm: preview quiz complete quizId=%s result=%s",
                result.quiz_id, "passed" if result.passed else "failed",
            )
            self._session.store.save_json(self._storage_key(), result.to_dict())

        return SubmissionOutcome(SubmissionStatus.ACCEPTED, result=result, delivered=delivered)

    def _report(self, result: AttemptResult) -> bool:
        """Write the five result fields and commit; True if the host took all of it."""
        bridge = self._session.bridge
        writes = [
            bridge.set_value(DataModelField.SCORE_RAW,         result.raw),
            bridge.set_value(DataModelField.SCORE_MAX,         result.max),
            bridge.set_value(DataModelField.SCORE_SCALED,      result.scaled),
            bridge.set_value(DataModelField.SUCCESS_STATUS,    result.success_status),
            bridge.set_value(DataModelField.COMPLETION_STATUS, CompletionStatus.COMPLETED),
        ]
        committed = bridge.commit()
        delivered = all(writes) and committed
        if not delivered and bridge.has_handle:
            logger.warning("Quiz %s result not fully delivered to the tracking API", result.quiz_id)
        return delivered

    # ── Preview persistence ──────────────────────────────────────────────────

    def _storage_key(self) -> str:
        return self._session.key(StorageCategory.QUIZ, self.quiz.id)

    def stored_result(self) -> Optional[AttemptResult]:
        """A result saved by an earlier preview-mode submission, if any."""
        data = self._session.store.load_json(self._storage_key())
        if not isinstance(data, Mapping):
            return None
        try:
            return AttemptResult.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored result for quiz %s unreadable: %s", self.quiz.id, exc)
            return None
