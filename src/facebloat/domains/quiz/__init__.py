"""Face bloat quiz engine — questionnaire model, profile deriver, scoring.

Public entry points::

    questionnaire = load_questionnaire(raw)          # or load_default_questionnaire()
    derived = derive_profile(ProfileState(menstruates="yes"))
    questions = eligible_questions(questionnaire, derived.route)
    result = score(questionnaire, {"sleep_hours": "C"}, derived.route)
"""

from __future__ import annotations

from facebloat.domains.quiz.domain_logic.errors import (
    NoAnswersError,
    NoBandMatchError,
    QuestionnaireValidationError,
    QuizError,
)
from facebloat.domains.quiz.domain_logic.loader import (
    load_default_questionnaire,
    load_questionnaire,
    load_questionnaire_file,
)
from facebloat.domains.quiz.domain_logic.models import (
    AnswerContext,
    DerivedProfile,
    ProfileMetrics,
    ProfileState,
    Question,
    Questionnaire,
    ScoreBand,
    ScoreResult,
    TopDriver,
)
from facebloat.domains.quiz.domain_logic.profile_deriver import derive_profile
from facebloat.domains.quiz.domain_logic.scoring_engine import eligible_questions, score

__all__ = [
    "AnswerContext",
    "DerivedProfile",
    "NoAnswersError",
    "NoBandMatchError",
    "ProfileMetrics",
    "ProfileState",
    "Question",
    "Questionnaire",
    "QuestionnaireValidationError",
    "QuizError",
    "ScoreBand",
    "ScoreResult",
    "TopDriver",
    "derive_profile",
    "eligible_questions",
    "load_default_questionnaire",
    "load_questionnaire",
    "load_questionnaire_file",
    "score",
]
