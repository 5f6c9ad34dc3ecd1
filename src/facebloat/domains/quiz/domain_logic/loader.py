"""Questionnaire loader — validates raw definitions into immutable models.

``load_questionnaire`` accepts any decoded blob (typically the result of
``yaml.safe_load`` or ``json.load``) and either returns a fully validated
``Questionnaire`` or raises ``QuestionnaireValidationError`` listing every
structural complaint found. A partially valid questionnaire is never returned.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from facebloat.domains.quiz.domain_logic.errors import QuestionnaireValidationError
from facebloat.domains.quiz.domain_logic.models import (
    APPLIES_TO,
    LETTERS,
    MAX_POINTS,
    PROFILE_FIELD_TYPES,
    Category,
    CategoryWeights,
    Option,
    ProfileField,
    ProfileFieldOption,
    Question,
    Questionnaire,
    ScoreBand,
    frozen_mapping,
)

logger = logging.getLogger(__name__)

# Bundled questionnaire definitions live next to the domain package.
QUESTIONNAIRE_DIR = Path(__file__).resolve().parent.parent / "questionnaires"
DEFAULT_QUESTIONNAIRE_FILE = QUESTIONNAIRE_DIR / "facebloat.quiz.yaml"

_MISSING = object()


class _Checker:
    """Accumulates path-qualified complaints while walking a raw blob."""

    def __init__(self) -> None:
        self.errors: list[str] = []

    def fail(self, path: str, message: str) -> None:
        self.errors.append(f"{path}: {message}")

    def obj(self, data: Any, path: str) -> dict[str, Any] | None:
        if not isinstance(data, dict):
            self.fail(path, f"expected an object, got {type(data).__name__}")
            return None
        return data

    def field(self, data: dict[str, Any], key: str, path: str) -> Any:
        value = data.get(key, _MISSING)
        if value is _MISSING:
            self.fail(_join(path, key), "required field missing")
        return value

    def string(self, data: dict[str, Any], key: str, path: str) -> str | None:
        value = self.field(data, key, path)
        if value is _MISSING:
            return None
        if not isinstance(value, str):
            self.fail(_join(path, key), f"expected a string, got {type(value).__name__}")
            return None
        return value

    def number(self, data: dict[str, Any], key: str, path: str) -> float | None:
        value = self.field(data, key, path)
        if value is _MISSING:
            return None
        if not _is_number(value):
            self.fail(_join(path, key), f"expected a number, got {type(value).__name__}")
            return None
        return value

    def boolean(self, data: dict[str, Any], key: str, path: str) -> bool | None:
        value = self.field(data, key, path)
        if value is _MISSING:
            return None
        if not isinstance(value, bool):
            self.fail(_join(path, key), f"expected a boolean, got {type(value).__name__}")
            return None
        return value

    def array(self, data: dict[str, Any], key: str, path: str) -> list[Any] | None:
        value = self.field(data, key, path)
        if value is _MISSING:
            return None
        if not isinstance(value, list):
            self.fail(_join(path, key), f"expected an array, got {type(value).__name__}")
            return None
        return value

    def choice(
        self, data: dict[str, Any], key: str, path: str, allowed: tuple[str, ...]
    ) -> str | None:
        value = self.field(data, key, path)
        if value is _MISSING:
            return None
        if value not in allowed:
            self.fail(
                _join(path, key),
                f"expected one of {', '.join(allowed)}, got {value!r}",
            )
            return None
        return value

    def number_record(self, value: Any, path: str) -> dict[str, float] | None:
        if not isinstance(value, dict):
            self.fail(path, f"expected an object, got {type(value).__name__}")
            return None
        record: dict[str, float] = {}
        for key, number in value.items():
            if not isinstance(key, str):
                self.fail(path, f"expected string keys, got {key!r}")
            elif not _is_number(number):
                self.fail(f"{path}.{key}", f"expected a number, got {type(number).__name__}")
            else:
                record[key] = number
        return record


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _is_number(value: Any) -> bool:
    # bool is an int subclass; a stray `true` is not a weight.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------

def _parse_option(check: _Checker, raw: Any, path: str) -> Option | None:
    data = check.obj(raw, path)
    if data is None:
        return None
    letter = check.choice(data, "letter", path, LETTERS)
    title = check.string(data, "title", path)
    points = check.number(data, "points", path)
    context = check.string(data, "context", path)
    if points is not None and not 0 <= points <= MAX_POINTS:
        check.fail(f"{path}.points", f"expected a value between 0 and {MAX_POINTS}, got {points}")
        points = None
    if None in (letter, title, points, context):
        return None
    return Option(letter=letter, title=title, points=points, context=context)


def _parse_question(check: _Checker, raw: Any, path: str) -> Question | None:
    data = check.obj(raw, path)
    if data is None:
        return None
    qid = check.string(data, "id", path)
    applies_to = check.choice(data, "appliesTo", path, APPLIES_TO)
    category_id = check.string(data, "categoryId", path)
    text = check.string(data, "text", path)
    acute = check.boolean(data, "acute", path)

    within_weight = None
    if data.get("withinCategoryWeight") is not None:
        within_weight = check.number_record(
            data["withinCategoryWeight"], f"{path}.withinCategoryWeight"
        )

    options: list[Option] = []
    raw_options = check.array(data, "options", path)
    ok = raw_options is not None
    for i, raw_option in enumerate(raw_options or []):
        option = _parse_option(check, raw_option, f"{path}.options[{i}]")
        if option is None:
            ok = False
        else:
            options.append(option)

    if not ok or None in (qid, applies_to, category_id, text, acute):
        return None
    return Question(
        id=qid,
        applies_to=applies_to,
        category_id=category_id,
        text=text,
        acute=acute,
        options=tuple(options),
        within_category_weight=(
            frozen_mapping(within_weight) if within_weight is not None else None
        ),
    )


def _parse_band(check: _Checker, raw: Any, path: str) -> ScoreBand | None:
    data = check.obj(raw, path)
    if data is None:
        return None
    low = check.number(data, "min", path)
    high = check.number(data, "max", path)
    band = check.string(data, "band", path)
    label = check.string(data, "label", path)
    blurb = check.string(data, "blurb", path)
    if None in (low, high, band, label, blurb):
        return None
    return ScoreBand(min=low, max=high, band=band, label=label, blurb=blurb)


def _parse_category(check: _Checker, raw: Any, path: str) -> Category | None:
    data = check.obj(raw, path)
    if data is None:
        return None
    cid = check.string(data, "id", path)
    label = check.string(data, "label", path)
    if cid is None or label is None:
        return None
    return Category(id=cid, label=label)


def _parse_profile_field(check: _Checker, raw: Any, path: str) -> ProfileField | None:
    data = check.obj(raw, path)
    if data is None:
        return None
    fid = check.string(data, "id", path)
    label = check.string(data, "label", path)
    ftype = check.choice(data, "type", path, PROFILE_FIELD_TYPES)

    options: tuple[ProfileFieldOption, ...] | None = None
    ok = True
    if data.get("options") is not None:
        raw_options = check.array(data, "options", path)
        parsed: list[ProfileFieldOption] = []
        for i, raw_option in enumerate(raw_options or []):
            opt_path = f"{path}.options[{i}]"
            opt = check.obj(raw_option, opt_path)
            if opt is None:
                ok = False
                continue
            value = check.string(opt, "value", opt_path)
            opt_label = check.string(opt, "label", opt_path)
            if value is None or opt_label is None:
                ok = False
                continue
            parsed.append(ProfileFieldOption(value=value, label=opt_label))
        ok = ok and raw_options is not None
        options = tuple(parsed)

    if not ok or None in (fid, label, ftype):
        return None
    return ProfileField(id=fid, label=label, type=ftype, options=options)


def _parse_list(
    check: _Checker, data: dict[str, Any], key: str, parser, path: str = ""
) -> list[Any]:
    items = check.array(data, key, path)
    prefix = _join(path, key)
    parsed = []
    for i, raw in enumerate(items or []):
        item = parser(check, raw, f"{prefix}[{i}]")
        if item is not None:
            parsed.append(item)
    return parsed


def _check_unique(check: _Checker, items: list[Any], key: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            check.fail(key, f"duplicate id {item.id!r}")
        seen.add(item.id)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_questionnaire(raw: Any) -> Questionnaire:
    """Validate a raw questionnaire blob and build an immutable ``Questionnaire``.

    Raises:
        QuestionnaireValidationError: With every structural complaint found.
    """
    check = _Checker()
    data = check.obj(raw, "questionnaire")
    if data is None:
        raise QuestionnaireValidationError(check.errors)

    version = check.string(data, "version", "")

    letter_points: dict[str, float] = {}
    raw_letter_points = check.field(data, "letterPoints", "")
    if raw_letter_points is not _MISSING:
        letter_points = check.number_record(raw_letter_points, "letterPoints") or {}
        for letter in letter_points:
            if letter not in LETTERS:
                check.fail("letterPoints", f"unknown letter {letter!r}")

    bands = _parse_list(check, data, "scoreBands", _parse_band)
    categories = _parse_list(check, data, "categories", _parse_category)
    questions = _parse_list(check, data, "questions", _parse_question)
    _check_unique(check, categories, "categories")
    _check_unique(check, questions, "questions")

    weights: dict[str, dict[str, float]] = {"male": {}, "female": {}}
    raw_weights = check.field(data, "categoryWeights", "")
    if raw_weights is not _MISSING:
        weights_obj = check.obj(raw_weights, "categoryWeights")
        if weights_obj is not None:
            for route in weights:
                route_weights = check.field(weights_obj, route, "categoryWeights")
                if route_weights is not _MISSING:
                    weights[route] = (
                        check.number_record(route_weights, f"categoryWeights.{route}") or {}
                    )

    profile_fields: list[ProfileField] = []
    raw_profile = check.field(data, "profile", "")
    if raw_profile is not _MISSING:
        profile_obj = check.obj(raw_profile, "profile")
        if profile_obj is not None:
            profile_fields = _parse_list(
                check, profile_obj, "fields", _parse_profile_field, "profile"
            )

    if check.errors:
        raise QuestionnaireValidationError(check.errors)

    questionnaire = Questionnaire(
        version=version,
        letter_points=frozen_mapping(letter_points),
        score_bands=tuple(bands),
        categories=tuple(categories),
        category_weights=CategoryWeights(
            male=frozen_mapping(weights["male"]),
            female=frozen_mapping(weights["female"]),
        ),
        profile_fields=tuple(profile_fields),
        questions=tuple(questions),
    )
    logger.info(
        "Loaded questionnaire v%s: %d questions, %d categories, %d bands",
        questionnaire.version,
        len(questionnaire.questions),
        len(questionnaire.categories),
        len(questionnaire.score_bands),
    )
    return questionnaire


def load_questionnaire_file(path: str | Path) -> Questionnaire:
    """Read a YAML (or JSON) questionnaire file and validate it."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise QuestionnaireValidationError([f"could not read questionnaire file: {exc}"]) from exc
    return load_questionnaire(data)


def load_default_questionnaire() -> Questionnaire:
    """Load the questionnaire bundled with the package."""
    return load_questionnaire_file(DEFAULT_QUESTIONNAIRE_FILE)
