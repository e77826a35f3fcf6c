"""
quiz_validator.py — Structural checks on quiz definitions
=========================================================
Runs on the raw (deserialised) quiz data before it is turned into a
``QuizSpec``, so that every problem is reported at once with a stable code
instead of stopping at the first pydantic error.

Quiz-level codes
----------------
  MISSING_ID, MISSING_QUESTIONS, EMPTY_QUESTIONS, INVALID_PASSING_SCORE,
  DUPLICATE_QUESTION_ID

Question-level codes
--------------------
  MISSING_QUESTION_ID, MISSING_QUESTION_TYPE, UNKNOWN_QUESTION_TYPE, MISSING_PROMPT,
  INVALID_ID (any question, option, blank, premise or response id that is not a string)
  choice:       MISSING_OPTIONS, INSUFFICIENT_OPTIONS, DUPLICATE_OPTION_ID,
                MISSING_CORRECT, INVALID_CORRECT_TYPE, EMPTY_CORRECT_ARRAY,
                INVALID_OPTION_REFERENCE
  true-false:   INVALID_BOOLEAN_CORRECT
  fill-blank:   MISSING_TEXT, MISSING_BLANKS, EMPTY_BLANKS, DUPLICATE_BLANK_ID,
                MISSING_BLANK_IN_TEXT, EXTRA_BLANK_IN_ARRAY,
                MISSING_CORRECT_ANSWERS, EMPTY_CORRECT_ANSWERS
  matching:     MISSING_PREMISES, MISSING_RESPONSES, MISSING_CORRECT_PAIRS,
                EMPTY_PREMISES, EMPTY_RESPONSES, EMPTY_CORRECT_PAIRS,
                DUPLICATE_PREMISE_ID, DUPLICATE_RESPONSE_ID,
                INVALID_PREMISE_REFERENCE, INVALID_RESPONSE_REFERENCE
File codes (validate_quiz_file only)
------------------------------------
  FILE_NOT_FOUND, PARSE_ERROR
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from schorm_runtime.quiz_model import QUESTION_TYPES

_BLANK_MARKER = re.compile(r"\[\[([^\[\]]+)\]\]")


@dataclass
class QuizValidationError:
    code:        str
    message:     str
    question_id: Optional[str] = None
    path:        str = ""


@dataclass
class QuizValidationResult:
    status: str                       # "ok" | "error"
    errors: list[QuizValidationError] = field(default_factory=list)
    file:   str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def codes(self) -> list[str]:
        return [e.code for e in self.errors]

    def summary(self) -> str:
        if not self.errors:
            return "Quiz definition is valid."
        return "\n".join(
            f"[{e.code}] {e.message}" + (f" (question {e.question_id})" if e.question_id else "")
            for e in self.errors
        )


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _ids(items: Any, out: Optional["_Collector"] = None, label: str = "",
         qid: Optional[str] = None, path: str = "") -> list[str]:
    """String ids of the mapping items; other non-null ids are reported as INVALID_ID."""
    ids: list[str] = []
    if not isinstance(items, list):
        return ids
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        value = item.get("id")
        if isinstance(value, str):
            ids.append(value)
        elif value is not None and out is not None:
            out.add("INVALID_ID", f"{label} id must be a string", qid, f"{path}[{i}].id")
    return ids


def _duplicates(values: list[str]) -> set[str]:
    seen: set[str] = set()
    dupes: set[str] = set()
    for v in values:
        if v in seen:
            dupes.add(v)
        seen.add(v)
    return dupes


class _Collector:
    def __init__(self) -> None:
        self.errors: list[QuizValidationError] = []

    def add(self, code: str, message: str, question_id: Optional[str] = None, path: str = "") -> None:
        self.errors.append(QuizValidationError(code, message, question_id, path))


# ─── Per-type checks ─────────────────────────────────────────────────────────

def _check_options(q: dict, qid: str, path: str, out: _Collector) -> set:
    options = q.get("options")
    if not isinstance(options, list):
        out.add("MISSING_OPTIONS", "Choice questions need an options list", qid, f"{path}.options")
        return set()
    if len(options) < 2:
        out.add("INSUFFICIENT_OPTIONS", "Choice questions need at least two options", qid, f"{path}.options")
    option_ids = _ids(options, out, "Option", qid, f"{path}.options")
    for dupe in _duplicates(option_ids):
        out.add("DUPLICATE_OPTION_ID", f"Option id '{dupe}' is used more than once", qid, f"{path}.options")
    return set(option_ids)


def _check_single_choice(q: dict, qid: str, path: str, out: _Collector) -> None:
    option_ids = _check_options(q, qid, path, out)
    correct = q.get("correct")
    if correct is None:
        out.add("MISSING_CORRECT", "Missing 'correct' option id", qid, f"{path}.correct")
    elif not isinstance(correct, str):
        out.add("INVALID_CORRECT_TYPE", "'correct' must be a single option id", qid, f"{path}.correct")
    elif option_ids and correct not in option_ids:
        out.add("INVALID_OPTION_REFERENCE", f"'correct' refers to unknown option '{correct}'",
                qid, f"{path}.correct")


def _check_multiple_response(q: dict, qid: str, path: str, out: _Collector) -> None:
    option_ids = _check_options(q, qid, path, out)
    correct = q.get("correct")
    if correct is None:
        out.add("MISSING_CORRECT", "Missing 'correct' option ids", qid, f"{path}.correct")
    elif not isinstance(correct, list):
        out.add("INVALID_CORRECT_TYPE", "'correct' must be a list of option ids", qid, f"{path}.correct")
    elif not correct:
        out.add("EMPTY_CORRECT_ARRAY", "'correct' must list at least one option id", qid, f"{path}.correct")
    else:
        for ref in correct:
            if option_ids and (not isinstance(ref, str) or ref not in option_ids):
                out.add("INVALID_OPTION_REFERENCE", f"'correct' refers to unknown option '{ref}'",
                        qid, f"{path}.correct")


def _check_true_false(q: dict, qid: str, path: str, out: _Collector) -> None:
    if "correct" not in q:
        out.add("MISSING_CORRECT", "Missing 'correct' boolean", qid, f"{path}.correct")
    elif not isinstance(q["correct"], bool):
        out.add("INVALID_BOOLEAN_CORRECT", "'correct' must be true or false", qid, f"{path}.correct")


def _check_fill_blank(q: dict, qid: str, path: str, out: _Collector) -> None:
    text = q.get("text")
    if not _non_empty_str(text):
        out.add("MISSING_TEXT", "Fill-blank questions need text with [[blank]] markers", qid, f"{path}.text")
        text = ""
    blanks = q.get("blanks")
    if blanks is None:
        out.add("MISSING_BLANKS", "Fill-blank questions need a blanks list", qid, f"{path}.blanks")
        return
    if not isinstance(blanks, list) or not blanks:
        out.add("EMPTY_BLANKS", "Blanks list must not be empty", qid, f"{path}.blanks")
        return

    blank_ids = _ids(blanks, out, "Blank", qid, f"{path}.blanks")
    for dupe in _duplicates(blank_ids):
        out.add("DUPLICATE_BLANK_ID", f"Blank id '{dupe}' is used more than once", qid, f"{path}.blanks")

    markers = set(_BLANK_MARKER.findall(text))
    declared = set(blank_ids)
    if text:
        for marker in sorted(markers - declared):
            out.add("MISSING_BLANK_IN_TEXT", f"Marker [[{marker}]] has no blank definition",
                    qid, f"{path}.text")
        for extra in sorted(declared - markers):
            out.add("EXTRA_BLANK_IN_ARRAY", f"Blank '{extra}' does not appear in the text",
                    qid, f"{path}.blanks")

    for i, blank in enumerate(blanks):
        bpath = f"{path}.blanks[{i}]"
        if not isinstance(blank, dict):
            continue
        answers = blank.get("correct_answers")
        if answers is None:
            out.add("MISSING_CORRECT_ANSWERS", "Blank needs correct_answers", qid, bpath)
        elif not isinstance(answers, list) or not answers:
            out.add("EMPTY_CORRECT_ANSWERS", "correct_answers must not be empty", qid, bpath)


def _check_matching(q: dict, qid: str, path: str, out: _Collector) -> None:
    lists = {}
    for name in ("premises", "responses", "correct_pairs"):
        value = q.get(name)
        if value is None:
            out.add(f"MISSING_{name.upper()}", f"Matching questions need '{name}'", qid, f"{path}.{name}")
        elif not isinstance(value, list) or not value:
            out.add(f"EMPTY_{name.upper()}", f"'{name}' must not be empty", qid, f"{path}.{name}")
        else:
            lists[name] = value

    premise_ids = _ids(lists.get("premises", []), out, "Premise", qid, f"{path}.premises")
    response_ids = _ids(lists.get("responses", []), out, "Response", qid, f"{path}.responses")
    for dupe in _duplicates(premise_ids):
        out.add("DUPLICATE_PREMISE_ID", f"Premise id '{dupe}' is used more than once", qid, f"{path}.premises")
    for dupe in _duplicates(response_ids):
        out.add("DUPLICATE_RESPONSE_ID", f"Response id '{dupe}' is used more than once", qid, f"{path}.responses")

    for i, pair in enumerate(lists.get("correct_pairs", [])):
        if not isinstance(pair, dict):
            continue
        ppath = f"{path}.correct_pairs[{i}]"
        if premise_ids and pair.get("premise") not in premise_ids:
            out.add("INVALID_PREMISE_REFERENCE", f"Pair refers to unknown premise '{pair.get('premise')}'",
                    qid, ppath)
        if response_ids and pair.get("response") not in response_ids:
            out.add("INVALID_RESPONSE_REFERENCE", f"Pair refers to unknown response '{pair.get('response')}'",
                    qid, ppath)


_TYPE_CHECKS = {
    "single-choice":     _check_single_choice,
    "multiple-response": _check_multiple_response,
    "true-false":        _check_true_false,
    "fill-blank":        _check_fill_blank,
    "matching":          _check_matching,
}


# ─── Public API ──────────────────────────────────────────────────────────────

def validate_quiz(data: Any) -> QuizValidationResult:
    """Validate one quiz definition (a dict as loaded from JSON/YAML)."""
    out = _Collector()
    if not isinstance(data, dict):
        out.add("MISSING_QUESTIONS", "Quiz definition must be a mapping")
        return QuizValidationResult(status="error", errors=out.errors)

    if not _non_empty_str(data.get("id")):
        out.add("MISSING_ID", "Quiz needs an id", path="id")

    passing = data.get("passing_score", data.get("passingScore"))
    if passing is not None and (
        isinstance(passing, bool) or not isinstance(passing, (int, float)) or not 0 <= passing <= 1
    ):
        out.add("INVALID_PASSING_SCORE", "passing_score must be a number between 0 and 1",
                path="passing_score")

    questions = data.get("questions")
    if questions is None:
        out.add("MISSING_QUESTIONS", "Quiz needs a questions list", path="questions")
        questions = []
    elif not isinstance(questions, list) or not questions:
        out.add("EMPTY_QUESTIONS", "Quiz must contain at least one question", path="questions")
        questions = []

    for dupe in _duplicates([q["id"] for q in questions if isinstance(q, dict) and _non_empty_str(q.get("id"))]):
        out.add("DUPLICATE_QUESTION_ID", f"Question id '{dupe}' is used more than once",
                question_id=dupe, path="questions")

    for i, q in enumerate(questions):
        path = f"questions[{i}]"
        if not isinstance(q, dict):
            out.add("MISSING_QUESTION_ID", "Question must be a mapping", path=path)
            continue
        qid = q.get("id") if _non_empty_str(q.get("id")) else None
        if qid is None:
            if q.get("id") is not None and not isinstance(q.get("id"), str):
                out.add("INVALID_ID", "Question id must be a string", path=f"{path}.id")
            else:
                out.add("MISSING_QUESTION_ID", "Question needs an id", path=f"{path}.id")
        qtype = q.get("type")
        if qtype is None:
            out.add("MISSING_QUESTION_TYPE", "Question needs a type", qid, f"{path}.type")
            continue
        if qtype not in QUESTION_TYPES:
            out.add("UNKNOWN_QUESTION_TYPE",
                    f"Unknown question type '{qtype}' (expected one of {', '.join(QUESTION_TYPES)})",
                    qid, f"{path}.type")
            continue
        if not _non_empty_str(q.get("prompt")):
            out.add("MISSING_PROMPT", "Question needs a prompt", qid, f"{path}.prompt")
        _TYPE_CHECKS[qtype](q, qid, path, out)

    return QuizValidationResult(status="ok" if not out.errors else "error", errors=out.errors)


def validate_quiz_file(path: str | Path) -> QuizValidationResult:
    """Load a JSON quiz file and validate it."""
    path = Path(path)
    if not path.exists():
        return QuizValidationResult(
            status="error",
            file=str(path),
            errors=[QuizValidationError("FILE_NOT_FOUND", f"Quiz file not found: {path}", path=str(path))],
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        return QuizValidationResult(
            status="error",
            file=str(path),
            errors=[QuizValidationError("PARSE_ERROR", f"Failed to parse quiz file: {exc}", path=str(path))],
        )
    result = validate_quiz(data)
    result.file = str(path)
    return result
