"""Errors raised by the quiz engine.

``QuestionnaireValidationError`` is a load-time configuration failure.
``NoAnswersError`` is recoverable by the caller (send the user back to the
questions). ``NoBandMatchError`` means the score bands have a gap and is a
data defect that must be surfaced, never defaulted.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz engine errors."""


class QuestionnaireValidationError(QuizError):
    """Raised when a questionnaire definition is structurally invalid."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid questionnaire data: " + "; ".join(self.errors))


class NoAnswersError(QuizError):
    """Raised when no eligible question has been answered."""

    def __init__(self, route: str) -> None:
        self.route = route
        super().__init__(f"No questions answered for route {route!r}")


class NoBandMatchError(QuizError):
    """Raised when the final score is not covered by any score band."""

    def __init__(self, score: int) -> None:
        self.score = score
        super().__init__(f"No score band found for score: {score}")
