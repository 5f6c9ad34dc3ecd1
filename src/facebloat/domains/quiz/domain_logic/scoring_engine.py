"""Deterministic quiz scoring: answers -> weighted 0-100 risk score.

Pipeline:
    1. Keep questions eligible for the route that have an answer.
    2. Group them by category (first-answered order).
    3. Category score = weighted mean of (points / 7 * 100), weighted by each
       question's within-category weight for the route.
    4. Final score = sum(category score * category weight / 100), rescaled to
       the weight actually used when that is below 100.
    5. Clamp to [0, 100], round half up, resolve the band.
    6. Top drivers = the three largest pre-rescale contributions.

Stale answer letters, dangling category ids and missing route weights make the
affected piece contribute nothing. They are logged, never raised.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from facebloat.domains.quiz.domain_logic.errors import NoAnswersError, NoBandMatchError
from facebloat.domains.quiz.domain_logic.models import (
    MAX_POINTS,
    ROUTES,
    AnswerContext,
    Answers,
    Question,
    Questionnaire,
    ScoreBand,
    ScoreResult,
    TopDriver,
)

logger = logging.getLogger(__name__)

TOP_DRIVER_COUNT = 3

# Category weights are expressed against a 100 basis.
WEIGHT_BASIS = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (same as JavaScript ``Math.round``)."""
    return int(math.floor(value + 0.5))


def _check_route(route: str) -> None:
    if route not in ROUTES:
        raise ValueError(f"Unknown route {route!r}; expected one of {', '.join(ROUTES)}")


def eligible_questions(questionnaire: Questionnaire, route: str) -> list[Question]:
    """Questions shown on ``route``, in questionnaire order."""
    _check_route(route)
    return [q for q in questionnaire.questions if q.applies_to_route(route)]


def normalize_points(points: float) -> float:
    """Map the fixed 0-7 option scale linearly onto 0-100."""
    return (points / MAX_POINTS) * 100


def _group_by_category(questions: Iterable[Question]) -> dict[str, list[Question]]:
    groups: dict[str, list[Question]] = {}
    for question in questions:
        groups.setdefault(question.category_id, []).append(question)
    return groups


def compute_category_scores(
    questionnaire: Questionnaire,
    answered: list[Question],
    answers: Answers,
    route: str,
) -> tuple[dict[str, float], list[AnswerContext]]:
    """Weighted mean score per category, plus the answer audit trail.

    Categories whose answered questions carry zero total weight get no score.
    """
    category_scores: dict[str, float] = {}
    contexts: list[AnswerContext] = []

    for category_id, questions in _group_by_category(answered).items():
        weighted_sum = 0.0
        total_weight = 0.0

        for question in questions:
            letter = answers[question.id]
            option = question.option_for(letter)
            if option is None:
                logger.warning(
                    "Questionnaire v%s: answer %r to question '%s' is not an offered option; skipping",
                    questionnaire.version,
                    letter,
                    question.id,
                )
                continue

            weight = question.weight_for(route)
            weighted_sum += normalize_points(option.points) * weight
            total_weight += weight

            contexts.append(AnswerContext(
                question_id=question.id,
                question_text=question.text,
                category_id=category_id,
                choice=letter,
                choice_title=option.title,
                context=option.context,
            ))

        if total_weight > 0:
            category_scores[category_id] = weighted_sum / total_weight

    return category_scores, contexts


def combine_category_scores(
    category_scores: dict[str, float], category_weights: dict[str, float]
) -> float:
    """Weighted final score, rescaled when less than the full weight basis was used."""
    weighted = 0.0
    used_weight = 0.0
    for category_id, category_score in category_scores.items():
        weight = category_weights[category_id]
        weighted += (category_score * weight) / WEIGHT_BASIS
        used_weight += weight

    # Unanswered categories drop out of the denominator instead of counting as 0.
    # Totals at or above the basis are left alone.
    if 0 < used_weight < WEIGHT_BASIS:
        weighted = (weighted * WEIGHT_BASIS) / used_weight
    return weighted


def resolve_band(questionnaire: Questionnaire, final_score: int) -> ScoreBand:
    """First band whose inclusive range covers ``final_score``."""
    for band in questionnaire.score_bands:
        if band.contains(final_score):
            return band
    raise NoBandMatchError(final_score)


def rank_top_drivers(
    questionnaire: Questionnaire,
    category_scores: dict[str, float],
    category_weights: dict[str, float],
    limit: int = TOP_DRIVER_COUNT,
) -> list[TopDriver]:
    drivers = [
        TopDriver(
            category_id=category_id,
            label=questionnaire.category_label(category_id),
            pct=round_half_up((category_score * category_weights[category_id]) / WEIGHT_BASIS),
        )
        for category_id, category_score in category_scores.items()
    ]
    # sorted() is stable: equal contributions keep first-answered order.
    return sorted(drivers, key=lambda d: d.pct, reverse=True)[:limit]


def score(questionnaire: Questionnaire, answers: Answers, route: str) -> ScoreResult:
    """Score ``answers`` against ``questionnaire`` on ``route``.

    Raises:
        NoAnswersError: No eligible question has an answer.
        NoBandMatchError: The final score falls in a gap between bands.
    """
    # An empty letter means the question was skipped.
    answered = [q for q in eligible_questions(questionnaire, route) if answers.get(q.id)]
    if not answered:
        raise NoAnswersError(route)

    category_scores, contexts = compute_category_scores(questionnaire, answered, answers, route)

    route_weights = questionnaire.category_weights.for_route(route)
    category_weights: dict[str, float] = {}
    for category_id in category_scores:
        if category_id not in route_weights:
            logger.warning(
                "Questionnaire v%s: no '%s' weight for category '%s'; it contributes nothing",
                questionnaire.version,
                route,
                category_id,
            )
        category_weights[category_id] = route_weights.get(category_id, 0)

    weighted = combine_category_scores(category_scores, category_weights)
    final_score = round_half_up(max(0.0, min(100.0, weighted)))
    band = resolve_band(questionnaire, final_score)

    return ScoreResult(
        score=final_score,
        band=band,
        top_drivers=rank_top_drivers(questionnaire, category_scores, category_weights),
        answer_contexts=contexts,
    )
