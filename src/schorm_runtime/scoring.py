"""
scoring.py — Per-type evaluators, completeness check, pass/fail
===============================================================
Every question is worth one point and is either fully right or wrong;
there is no partial credit inside a question.

  single-choice       selected id == correct id
  multiple-response   selected set == correct set (subsets score 0)
  true-false          selected bool == correct bool
  fill-blank          every blank matches one accepted answer after
                      normalisation (trim → lowercase, per blank flags)
  matching            every premise paired with its designated response

Aggregation
-----------
  raw    = Σ points earned
  max    = number of questions
  scaled = clamp(raw / max, 0, 1)
  passed = scaled ≥ passing_score  (DEFAULT_PASSING_SCORE when not given)

Answer shapes (as collected from the page)
------------------------------------------
  single-choice       "option-id"
  multiple-response   ["a", "c"]   (any iterable of ids)
  true-false          True / False  ("true" / "false" accepted)
  fill-blank          {"blank1": "Paris"}
  matching            {"premise-id": "response-id"}
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from schorm_runtime.quiz_model import (
    FillBlankQuestion,
    FillBlankSpec,
    MatchingQuestion,
    MultipleResponseQuestion,
    QuizSpec,
    SingleChoiceQuestion,
    TrueFalseQuestion,
)

DEFAULT_PASSING_SCORE: float = 0.8
MIN_SCALED_SCORE: float = 0.0
MAX_SCALED_SCORE: float = 1.0
POINTS_PER_QUESTION: float = 1.0


# ─── Result types ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QuestionEvaluation:
    question_id:   str
    correct:       bool
    points_earned: float


@dataclass(frozen=True)
class CompletenessReport:
    complete: bool
    missing:  tuple[str, ...] = ()   # question ids without a usable answer


@dataclass(frozen=True)
class QuizEvaluation:
    quiz_id:   str
    raw:       float
    max:       float
    scaled:    float
    passed:    bool
    threshold: float
    questions: tuple[QuestionEvaluation, ...] = field(default_factory=tuple)


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    return None


def _as_id_set(value: Any) -> set[str]:
    if value is None or isinstance(value, (str, bytes)):
        return {value} if value else set()
    try:
        return {str(v) for v in value}
    except TypeError:
        return set()


def normalize_blank_answer(value: str, spec: FillBlankSpec) -> str:
    """Trim (if enabled) then lowercase (unless case-sensitive)."""
    if spec.trim_whitespace:
        value = value.strip()
    if not spec.case_sensitive:
        value = value.lower()
    return value


def _result(question_id: str, correct: bool) -> QuestionEvaluation:
    return QuestionEvaluation(
        question_id=question_id,
        correct=correct,
        points_earned=POINTS_PER_QUESTION if correct else 0.0,
    )


# ─── Evaluators ──────────────────────────────────────────────────────────────

def evaluate_single_choice(question: SingleChoiceQuestion, answer: Any) -> QuestionEvaluation:
    return _result(question.id, isinstance(answer, str) and answer == question.correct)


def evaluate_multiple_response(question: MultipleResponseQuestion, answer: Any) -> QuestionEvaluation:
    selected = _as_id_set(answer)
    return _result(question.id, bool(selected) and selected == set(question.correct))


def evaluate_true_false(question: TrueFalseQuestion, answer: Any) -> QuestionEvaluation:
    selected = _as_bool(answer)
    return _result(question.id, selected is not None and selected == question.correct)


def evaluate_fill_blank(question: FillBlankQuestion, answer: Any) -> QuestionEvaluation:
    if not isinstance(answer, Mapping) or not question.blanks:
        return _result(question.id, False)
    for blank in question.blanks:
        given = answer.get(blank.id)
        if not isinstance(given, str):
            return _result(question.id, False)
        accepted = {normalize_blank_answer(a, blank) for a in blank.correct_answers}
        if normalize_blank_answer(given, blank) not in accepted:
            return _result(question.id, False)
    return _result(question.id, True)


def evaluate_matching(question: MatchingQuestion, answer: Any) -> QuestionEvaluation:
    if not isinstance(answer, Mapping) or not question.correct_pairs:
        return _result(question.id, False)
    correct = all(answer.get(premise) == response
                  for premise, response in question.answer_key.items())
    return _result(question.id, correct)


EVALUATORS: dict[str, Callable[[Any, Any], QuestionEvaluation]] = {
    "single-choice":     evaluate_single_choice,
    "multiple-response": evaluate_multiple_response,
    "true-false":        evaluate_true_false,
    "fill-blank":        evaluate_fill_blank,
    "matching":          evaluate_matching,
}


def evaluate_question(question, answer: Any) -> QuestionEvaluation:
    """Dispatch to the evaluator for ``question.type``."""
    evaluator = EVALUATORS.get(getattr(question, "type", None))
    if evaluator is None:
        raise ValueError(f"No evaluator for question type {getattr(question, 'type', None)!r}")
    return evaluator(question, answer)


# ─── Completeness ────────────────────────────────────────────────────────────

def _is_answered(question, answer: Any) -> bool:
    if answer is None:
        return False
    qtype = question.type
    if qtype == "single-choice":
        return isinstance(answer, str) and answer != ""
    if qtype == "multiple-response":
        return bool(_as_id_set(answer))
    if qtype == "true-false":
        return _as_bool(answer) is not None
    if qtype == "fill-blank":
        if not isinstance(answer, Mapping):
            return False
        return all(
            isinstance(answer.get(b.id), str) and answer.get(b.id).strip() != ""
            for b in question.blanks
        )
    if qtype == "matching":
        if not isinstance(answer, Mapping):
            return False
        return all(answer.get(p.id) for p in question.premises)
    return False


def check_answers_complete(quiz: QuizSpec, answers: Mapping[str, Any]) -> CompletenessReport:
    """Every question needs an answer in the shape its type requires."""
    missing = tuple(q.id for q in quiz.questions if not _is_answered(q, answers.get(q.id)))
    return CompletenessReport(complete=not missing, missing=missing)


# ─── Aggregation ─────────────────────────────────────────────────────────────

def scaled_score(raw: float, max_score: float) -> float:
    """raw / max clamped to [0, 1]; a zero max scores 0."""
    if not max_score or max_score <= 0:
        return MIN_SCALED_SCORE
    return max(MIN_SCALED_SCORE, min(MAX_SCALED_SCORE, raw / max_score))


def passing_threshold(passing_score: Any = None) -> float:
    """The quiz's own threshold when it is a number, else the default."""
    if isinstance(passing_score, numbers.Real) and not isinstance(passing_score, bool):
        return float(passing_score)
    return DEFAULT_PASSING_SCORE


def quiz_passed(scaled: float, passing_score: Any = None) -> bool:
    clamped = max(MIN_SCALED_SCORE, min(MAX_SCALED_SCORE, scaled))
    return clamped >= passing_threshold(passing_score)


def evaluate_quiz(quiz: QuizSpec, answers: Mapping[str, Any]) -> QuizEvaluation:
    """Score every question and derive raw / max / scaled / passed."""
    results = tuple(evaluate_question(q, answers.get(q.id)) for q in quiz.questions)
    raw = sum(r.points_earned for r in results)
    max_score = float(len(results)) * POINTS_PER_QUESTION
    scaled = scaled_score(raw, max_score)
    threshold = passing_threshold(quiz.passing_score)
    return QuizEvaluation(
        quiz_id=quiz.id,
        raw=raw,
        max=max_score,
        scaled=scaled,
        passed=quiz_passed(scaled, quiz.passing_score),
        threshold=threshold,
        questions=results,
    )
