"""MCP tools for taking and scoring the face bloat quiz.

Stateless tools (``list_questions``, ``derive_profile_metrics``,
``score_answers``) call the engine directly. Session tools keep one
``QuizSession`` per ``session_id`` in the injected key-value store, so a
client can answer incrementally and come back later.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

from facebloat.domains.quiz.domain_logic.errors import NoAnswersError, NoBandMatchError
from facebloat.domains.quiz.domain_logic.models import ROUTES, ProfileState, Questionnaire
from facebloat.domains.quiz.domain_logic.profile_deriver import derive_profile
from facebloat.domains.quiz.domain_logic.results_formatter import format_results_as_text
from facebloat.domains.quiz.domain_logic.scoring_engine import eligible_questions, score
from facebloat.domains.quiz.session.quiz_session import QuizSession

if TYPE_CHECKING:
    from facebloat.core.audit.logger import AuditLogger
    from facebloat.core.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

NO_ANSWERS_MESSAGE = "Please answer at least one question."
CONFIG_ERROR_MESSAGE = "Something went wrong, please reload."


def _error(error_type: str, message: str, **extra: Any) -> str:
    return json.dumps({"status": "error", "error_type": error_type, "message": message, **extra})


def _question_payload(question) -> dict[str, Any]:
    return {
        "id": question.id,
        "category_id": question.category_id,
        "text": question.text,
        "acute": question.acute,
        "options": [{"letter": o.letter, "title": o.title} for o in question.options],
    }


def register_quiz_tools(
    mcp: FastMCP,
    questionnaire: Questionnaire,
    store: KeyValueStore,
    *,
    namespace: str = "facebloat",
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register quiz tools on the MCP server."""

    def _session(session_id: str) -> QuizSession:
        session = QuizSession(questionnaire, store, namespace=f"{namespace}:{session_id}")
        session.load()
        return session

    def _audit(action: str, **kwargs: Any) -> None:
        if audit_logger is not None:
            audit_logger.log_quiz_event(
                action, questionnaire_version=questionnaire.version, **kwargs
            )

    def _score(
        answers: dict[str, str],
        route: str,
        *,
        session_id: str | None = None,
        session: QuizSession | None = None,
    ) -> str:
        action = "submit" if session is not None else "score"
        start_time = time.monotonic()
        try:
            if session is not None:
                result = session.submit()
            else:
                result = score(questionnaire, answers, route)
        except NoAnswersError as exc:
            _audit(action, session_id=session_id, route=route, status="failure",
                   error_type=type(exc).__name__)
            return _error("no_answers", NO_ANSWERS_MESSAGE)
        except NoBandMatchError as exc:
            logger.exception("Questionnaire v%s has a band gap", questionnaire.version)
            _audit(action, session_id=session_id, route=route, answers=answers,
                   status="failure", error_type=type(exc).__name__)
            return _error("no_band_match", CONFIG_ERROR_MESSAGE, score=exc.score)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        _audit(action, session_id=session_id, route=route, answers=answers,
               score=result.score, band=result.band.band, duration_ms=round(elapsed_ms, 3))
        return json.dumps({"status": "ok", "route": route, "result": result.as_dict()})

    # ------------------------------------------------------------------
    # Stateless
    # ------------------------------------------------------------------

    @mcp.tool
    def get_questionnaire() -> str:
        """Describe the questionnaire: version, categories, score bands, profile fields."""
        return json.dumps(questionnaire.summary())

    @mcp.tool
    def list_questions(menstruates: str = "") -> str:
        """List the questions that apply to a user, in order.

        Args:
            menstruates: 'yes' routes to the female question set; anything else to male.
        """
        route = derive_profile(ProfileState(menstruates=menstruates or None)).route
        questions = eligible_questions(questionnaire, route)
        return json.dumps({
            "route": route,
            "count": len(questions),
            "questions": [_question_payload(q) for q in questions],
        })

    @mcp.tool
    def derive_profile_metrics(profile: dict[str, Any]) -> str:
        """Derive the question route and body metrics from profile input.

        Args:
            profile: Profile fields, e.g. {"menstruates": "yes", "height": 170,
                "heightUnit": "cm", "weight": 65, "weightUnit": "kg"}.
        """
        try:
            state = ProfileState.from_dict(profile)
        except ValueError as exc:
            return _error("invalid_profile", str(exc))
        return json.dumps(derive_profile(state).as_dict())

    @mcp.tool
    def score_answers(answers: dict[str, str], route: str = "male") -> str:
        """Score a complete or partial set of answers.

        Args:
            answers: Question id -> chosen letter (A-H).
            route: 'male' or 'female'.
        """
        if route not in ROUTES:
            return _error("invalid_route", f"route must be one of {', '.join(ROUTES)}")
        return _score(answers, route)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @mcp.tool
    def save_profile(session_id: str, profile: dict[str, Any]) -> str:
        """Store profile input for a quiz session and return its derived route.

        Args:
            session_id: Caller-chosen session identifier.
            profile: Profile fields in the same shape as derive_profile_metrics.
        """
        try:
            state = ProfileState.from_dict(profile)
        except ValueError as exc:
            return _error("invalid_profile", str(exc))
        session = _session(session_id)
        session.set_profile(state)
        _audit("profile_saved", session_id=session_id, route=session.route, answers=profile)
        return json.dumps({
            "status": "saved",
            "session_id": session_id,
            **session.derived.as_dict(),
            "question_count": len(session.questions),
        })

    @mcp.tool
    def save_answer(session_id: str, question_id: str, letter: str) -> str:
        """Record one answer for a quiz session.

        Args:
            session_id: Caller-chosen session identifier.
            question_id: Id of the question being answered.
            letter: Chosen option letter (A-H).
        """
        session = _session(session_id)
        try:
            session.set_answer(question_id, letter)
        except ValueError as exc:
            return _error("invalid_answer", str(exc))
        _audit("answer_saved", session_id=session_id, route=session.route,
               metadata={"question_id": question_id})
        return json.dumps({
            "status": "saved",
            "session_id": session_id,
            "answered": len(session.answers),
            "total": len(session.questions),
        })

    @mcp.tool
    def submit_quiz(session_id: str) -> str:
        """Score everything answered so far in a session."""
        session = _session(session_id)
        return _score(session.answers, session.route, session_id=session_id, session=session)

    @mcp.tool
    def get_results_text(session_id: str, include_coaching: bool = True) -> str:
        """Render a session's current answers as a plain-text report.

        Read-only: the session stays on its current step and nothing is audited.

        Args:
            session_id: Caller-chosen session identifier.
            include_coaching: Include per-answer coaching notes.
        """
        session = _session(session_id)
        try:
            result = score(questionnaire, session.answers, session.route)
        except NoAnswersError:
            return _error("no_answers", NO_ANSWERS_MESSAGE)
        except NoBandMatchError as exc:
            logger.exception("Questionnaire v%s has a band gap", questionnaire.version)
            return _error("no_band_match", CONFIG_ERROR_MESSAGE, score=exc.score)
        return format_results_as_text(result, include_coaching=include_coaching)

    @mcp.tool
    def reset_quiz(session_id: str) -> str:
        """Delete all stored state for a quiz session."""
        session = _session(session_id)
        session.reset()
        _audit("reset", session_id=session_id)
        logger.info("Reset quiz session %s", session_id)
        return json.dumps({"status": "reset", "session_id": session_id})
