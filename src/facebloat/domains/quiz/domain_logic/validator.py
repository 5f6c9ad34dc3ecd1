"""Questionnaire integrity checks — catch data defects before users hit them.

The loader enforces structure. These checks look at properties the loader
deliberately tolerates (dangling category references, weights for unknown
categories) and at band coverage, which scoring depends on. They report
problems as strings instead of raising, so callers can log or fail as they see
fit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from facebloat.domains.quiz.domain_logic.errors import QuestionnaireValidationError
from facebloat.domains.quiz.domain_logic.loader import load_questionnaire_file
from facebloat.domains.quiz.domain_logic.models import ROUTES, Questionnaire

logger = logging.getLogger(__name__)


def check_band_coverage(
    questionnaire: Questionnaire, lo: int = 0, hi: int = 100
) -> list[str]:
    """Every integer score in [lo, hi] must match exactly one band."""
    errors: list[str] = []
    for value in range(lo, hi + 1):
        matches = [b.band for b in questionnaire.score_bands if b.contains(value)]
        if not matches:
            errors.append(f"Score {value} is not covered by any band")
        elif len(matches) > 1:
            errors.append(f"Score {value} is covered by multiple bands: {', '.join(matches)}")
    return errors


def find_dangling_references(questionnaire: Questionnaire) -> list[str]:
    """Cross-reference questions and weights against the category list."""
    errors: list[str] = []
    known = {c.id for c in questionnaire.categories}

    for question in questionnaire.questions:
        if question.category_id not in known:
            errors.append(
                f"Question '{question.id}' references unknown category '{question.category_id}'"
            )

    for route in ROUTES:
        weights = questionnaire.category_weights.for_route(route)
        for category_id in weights:
            if category_id not in known:
                errors.append(f"Weight for route '{route}' names unknown category '{category_id}'")
        for question in questionnaire.questions:
            if question.applies_to_route(route) and question.category_id not in weights:
                errors.append(
                    f"Question '{question.id}' has no category weight on route '{route}'"
                )
    return errors


def validate_questionnaire_file(
    path: str | Path,
) -> tuple[Questionnaire | None, list[str]]:
    """Load a questionnaire file and run every integrity check on it.

    Returns: (questionnaire_or_none, errors)
    """
    path = Path(path)
    try:
        questionnaire = load_questionnaire_file(path)
    except QuestionnaireValidationError as exc:
        return None, [f"{path}: {err}" for err in exc.errors]

    errors = [
        f"{path}: {err}"
        for err in check_band_coverage(questionnaire) + find_dangling_references(questionnaire)
    ]
    return questionnaire, errors


def report_integrity(questionnaire: Questionnaire) -> int:
    """Log every integrity problem as a warning. Returns the problem count."""
    problems = check_band_coverage(questionnaire) + find_dangling_references(questionnaire)
    for problem in problems:
        logger.warning("Questionnaire v%s: %s", questionnaire.version, problem)
    return len(problems)
