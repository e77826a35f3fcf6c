"""
Quiz definition models.

A page embeds its quiz as JSON; ``QuizSpec.from_json`` turns that into a
typed object.  Questions are a discriminated union on ``type``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ─── Shared pieces ───────────────────────────────────────────────────────────

class GlobalFeedback(BaseModel):
    correct:   Optional[str] = None
    incorrect: Optional[str] = None


class Option(BaseModel):
    id:       str
    text:     str = ""
    feedback: Optional[str] = None


class QuestionBase(BaseModel):
    """Fields common to every question variant."""
    model_config = ConfigDict(extra="ignore")

    id:       str
    prompt:   str = ""
    points:   float = Field(default=1.0, ge=0,
                            description="Informational; scoring weighs every question equally")
    feedback: Optional[GlobalFeedback] = None
    tags:     list[str] = Field(default_factory=list)


# ─── Variants ────────────────────────────────────────────────────────────────

class SingleChoiceQuestion(QuestionBase):
    type:            Literal["single-choice"] = "single-choice"
    options:         list[Option]
    correct:         str
    shuffle_options: bool = False


class MultipleResponseQuestion(QuestionBase):
    type:            Literal["multiple-response"] = "multiple-response"
    options:         list[Option]
    correct:         list[str]
    shuffle_options: bool = False


class TrueFalseQuestion(QuestionBase):
    type:    Literal["true-false"] = "true-false"
    correct: bool


class FillBlankSpec(BaseModel):
    """One gap in a fill-blank question."""
    id:              str
    correct_answers: list[str]
    case_sensitive:  bool = False
    trim_whitespace: bool = True
    feedback:        Optional[GlobalFeedback] = None


class FillBlankQuestion(QuestionBase):
    type:   Literal["fill-blank"] = "fill-blank"
    text:   str = ""          # e.g. "The capital of France is [[blank1]]."
    blanks: list[FillBlankSpec]


class MatchingPremise(BaseModel):
    id:   str
    text: str = ""


class MatchingResponse(BaseModel):
    id:   str
    text: str = ""


class MatchingPair(BaseModel):
    premise:  str
    response: str


class MatchingQuestion(QuestionBase):
    type:          Literal["matching"] = "matching"
    premises:      list[MatchingPremise]
    responses:     list[MatchingResponse]
    correct_pairs: list[MatchingPair]

    @property
    def answer_key(self) -> dict[str, str]:
        """premise id → designated response id."""
        return {p.premise: p.response for p in self.correct_pairs}


Question = Annotated[
    Union[
        SingleChoiceQuestion,
        MultipleResponseQuestion,
        TrueFalseQuestion,
        FillBlankQuestion,
        MatchingQuestion,
    ],
    Field(discriminator="type"),
]

QUESTION_TYPES: tuple[str, ...] = (
    "single-choice",
    "multiple-response",
    "true-false",
    "fill-blank",
    "matching",
)


# ─── Quiz ────────────────────────────────────────────────────────────────────

class QuizSpec(BaseModel):
    """A quiz as embedded in a generated page."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id:            str
    module:        str = ""
    title:         str = ""
    questions:     list[Question] = Field(default_factory=list)
    passing_score: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("passing_score", "passingScore"),
        description="Fraction in [0, 1]; the runtime default applies when absent",
    )

    @field_validator("passing_score", mode="before")
    @classmethod
    def _numeric_passing_score(cls, value: Any) -> Optional[float]:
        # Only a real number in [0, 1] counts; strings, bools and out-of-range
        # values fall back to the runtime default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not 0.0 <= value <= 1.0:
            return None
        return float(value)

    @classmethod
    def from_json(cls, text: str | bytes) -> "QuizSpec":
        return cls.model_validate_json(text)

    @classmethod
    def from_dict(cls, data: dict) -> "QuizSpec":
        return cls.model_validate(data)

    def question_by_id(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    @property
    def question_count(self) -> int:
        return len(self.questions)
