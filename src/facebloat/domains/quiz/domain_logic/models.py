"""Questionnaire, profile and result models for the face bloat quiz."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

Letter = Literal["A", "B", "C", "D", "E", "F", "G", "H"]
Route = Literal["male", "female"]
AppliesTo = Literal["all", "male", "female"]

LETTERS: tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H")
ROUTES: tuple[str, ...] = ("male", "female")
APPLIES_TO: tuple[str, ...] = ("all", "male", "female")
PROFILE_FIELD_TYPES: tuple[str, ...] = ("select", "input")

# Option points live on a fixed 0-7 scale; scoring maps them linearly to 0-100.
MAX_POINTS = 7

DEFAULT_QUESTION_WEIGHT = 1.0

# Answers are a plain mapping of question id -> chosen letter.
Answers = Mapping[str, str]


def frozen_mapping(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


# ---------------------------------------------------------------------------
# Questionnaire definition (loaded once, read-only)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Option:
    """One selectable answer to a question."""

    letter: Letter
    title: str
    points: float  # 0-7
    context: str  # coaching copy shown with the result


@dataclass(frozen=True)
class Question:
    """A single quiz question, routed by ``applies_to``."""

    id: str
    applies_to: AppliesTo
    category_id: str
    text: str
    acute: bool
    options: tuple[Option, ...]
    within_category_weight: Mapping[str, float] | None = None

    def applies_to_route(self, route: str) -> bool:
        return self.applies_to == "all" or self.applies_to == route

    def weight_for(self, route: str) -> float:
        """Weight of this question relative to its category siblings on ``route``."""
        if self.within_category_weight is None:
            return DEFAULT_QUESTION_WEIGHT
        return self.within_category_weight.get(route, DEFAULT_QUESTION_WEIGHT)

    def option_for(self, letter: str) -> Option | None:
        for option in self.options:
            if option.letter == letter:
                return option
        return None


@dataclass(frozen=True)
class Category:
    id: str
    label: str


@dataclass(frozen=True)
class ScoreBand:
    """An inclusive integer score range with user-facing copy."""

    min: float
    max: float
    band: str
    label: str
    blurb: str

    def contains(self, score: int) -> bool:
        return self.min <= score <= self.max

    def as_dict(self) -> dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "band": self.band,
            "label": self.label,
            "blurb": self.blurb,
        }


@dataclass(frozen=True)
class CategoryWeights:
    """Per-route category weights (category id -> integer weight)."""

    male: Mapping[str, float]
    female: Mapping[str, float]

    def for_route(self, route: str) -> Mapping[str, float]:
        return self.female if route == "female" else self.male


@dataclass(frozen=True)
class ProfileFieldOption:
    value: str
    label: str


@dataclass(frozen=True)
class ProfileField:
    """Descriptor for an optional demographic input shown before the quiz."""

    id: str
    label: str
    type: str  # 'select' | 'input'
    options: tuple[ProfileFieldOption, ...] | None = None


@dataclass(frozen=True)
class Questionnaire:
    """A validated, immutable questionnaire definition."""

    version: str
    letter_points: Mapping[str, float]
    score_bands: tuple[ScoreBand, ...]
    categories: tuple[Category, ...]
    category_weights: CategoryWeights
    profile_fields: tuple[ProfileField, ...]
    questions: tuple[Question, ...]

    def category(self, category_id: str) -> Category | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def category_label(self, category_id: str) -> str:
        """Display label for a category, falling back to the raw id."""
        category = self.category(category_id)
        return category.label if category is not None else category_id

    def question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def summary(self) -> dict[str, Any]:
        """JSON-friendly overview used by the service surface."""
        return {
            "version": self.version,
            "question_count": len(self.questions),
            "categories": [{"id": c.id, "label": c.label} for c in self.categories],
            "score_bands": [b.as_dict() for b in self.score_bands],
            "profile_fields": [
                {
                    "id": f.id,
                    "label": f.label,
                    "type": f.type,
                    "options": (
                        [{"value": o.value, "label": o.label} for o in f.options]
                        if f.options is not None
                        else None
                    ),
                }
                for f in self.profile_fields
            ],
        }


# ---------------------------------------------------------------------------
# Profile input and derivation
# ---------------------------------------------------------------------------

# Persisted (camelCase) key for each ProfileState attribute.
_PROFILE_KEYS: dict[str, str] = {
    "age": "age",
    "menstruates": "menstruates",
    "height": "height",
    "weight": "weight",
    "height_unit": "heightUnit",
    "weight_unit": "weightUnit",
    "waist": "waist",
    "waist_unit": "waistUnit",
    "weight_change": "weightChange",
}

_MEASUREMENTS = frozenset({"height", "weight", "waist"})


def _measurement(key: str, value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Profile field '{key}' must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ValueError(f"Profile field '{key}' must be a number, got {value!r}")


@dataclass
class ProfileState:
    """Caller-owned demographic input. Every field is optional."""

    age: str | None = None
    menstruates: str | None = None
    height: float | None = None
    weight: float | None = None
    height_unit: str | None = None  # 'cm' | 'ft'
    weight_unit: str | None = None  # 'kg' | 'lbs'
    waist: float | None = None
    waist_unit: str | None = None  # 'cm' | 'in'
    weight_change: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ProfileState:
        """Build from the persisted camelCase layout; unknown keys are ignored.

        Measurements may arrive as form strings ("170"); they are converted to
        numbers and an empty string counts as not entered.

        Raises:
            ValueError: A measurement is not a number.
        """
        data = data or {}
        values: dict[str, Any] = {}
        for attr, key in _PROFILE_KEYS.items():
            if key not in data:
                continue
            value = data[key]
            if attr in _MEASUREMENTS:
                value = _measurement(key, value)
            values[attr] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Persisted camelCase layout containing only the fields that are set."""
        return {
            key: getattr(self, attr)
            for attr, key in _PROFILE_KEYS.items()
            if getattr(self, attr) is not None
        }


@dataclass
class ProfileMetrics:
    bmi: float | None = None
    waist_to_height: float | None = None

    def as_dict(self) -> dict[str, float]:
        metrics: dict[str, float] = {}
        if self.bmi is not None:
            metrics["bmi"] = self.bmi
        if self.waist_to_height is not None:
            metrics["waistToHeight"] = self.waist_to_height
        return metrics


@dataclass
class DerivedProfile:
    route: Route
    metrics: ProfileMetrics = field(default_factory=ProfileMetrics)

    def as_dict(self) -> dict[str, Any]:
        return {"route": self.route, "metrics": self.metrics.as_dict()}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class AnswerContext:
    """Audit record of one answered question and its coaching copy."""

    question_id: str
    question_text: str
    category_id: str
    choice: str
    choice_title: str
    context: str

    def as_dict(self) -> dict[str, str]:
        return {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "categoryId": self.category_id,
            "choice": self.choice,
            "choiceTitle": self.choice_title,
            "context": self.context,
        }


@dataclass
class TopDriver:
    category_id: str
    label: str
    pct: int

    def as_dict(self) -> dict[str, Any]:
        return {"categoryId": self.category_id, "label": self.label, "pct": self.pct}


@dataclass
class ScoreResult:
    """Outcome of a single scoring call."""

    score: int  # 0-100
    band: ScoreBand
    top_drivers: list[TopDriver] = field(default_factory=list)
    answer_contexts: list[AnswerContext] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "band": self.band.as_dict(),
            "topDrivers": [d.as_dict() for d in self.top_drivers],
            "answerContexts": [a.as_dict() for a in self.answer_contexts],
        }

