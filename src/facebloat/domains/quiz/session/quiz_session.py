"""Quiz session — the profile → quiz → results flow over an injected store.

Every state change is written through to the store immediately, one value per
field, under ``"{namespace}:{field}:v{questionnaire version}"``:

    profile        JSON object (camelCase profile keys)
    answers        JSON object (question id -> letter)
    currentStep    "profile" | "quiz" | "results"
    questionIndex  decimal string

Bumping the questionnaire version therefore starts every user fresh. The
result itself is not persisted; it is recomputed on submit.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from facebloat.core.storage.kv import KeyValueStore
from facebloat.domains.quiz.domain_logic.models import (
    LETTERS,
    DerivedProfile,
    ProfileState,
    Question,
    Questionnaire,
    ScoreResult,
)
from facebloat.domains.quiz.domain_logic.profile_deriver import derive_profile
from facebloat.domains.quiz.domain_logic.scoring_engine import eligible_questions, score

logger = logging.getLogger(__name__)

STEPS = ("profile", "quiz", "results")
PERSISTED_FIELDS = ("profile", "answers", "currentStep", "questionIndex")
DEFAULT_NAMESPACE = "facebloat"


class QuizSession:
    """Stateful wrapper around the pure quiz engine for one user.

    Usage::

        session = QuizSession(questionnaire, InMemoryStore())
        session.load()
        session.set_profile(ProfileState(menstruates="yes"))
        session.go_to_step("quiz")
        session.set_answer(session.current_question.id, "C")
        result = session.submit()
    """

    def __init__(
        self,
        questionnaire: Questionnaire,
        store: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._quiz = questionnaire
        self._store = store
        self._namespace = namespace

        self._profile = ProfileState()
        self._answers: dict[str, str] = {}
        self._step = "profile"
        self._index = 0
        self._result: ScoreResult | None = None

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def storage_key(self, name: str) -> str:
        return f"{self._namespace}:{name}:v{self._quiz.version}"

    def _save(self, name: str, value: str) -> None:
        self._store.set(self.storage_key(name), value)

    def _read_json(self, name: str) -> Any:
        raw = self._store.get(self.storage_key(name))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed stored %s for %s", name, self._namespace)
            return None

    def load(self) -> None:
        """Restore state from the store. Malformed values are skipped."""
        profile = self._read_json("profile")
        if isinstance(profile, dict):
            try:
                self._profile = ProfileState.from_dict(profile)
            except ValueError as exc:
                logger.warning("Ignoring malformed stored profile for %s: %s", self._namespace, exc)

        answers = self._read_json("answers")
        if isinstance(answers, dict):
            self._answers = {str(k): v for k, v in answers.items() if isinstance(v, str)}

        step = self._store.get(self.storage_key("currentStep"))
        if step in STEPS:
            self._step = step

        index = self._store.get(self.storage_key("questionIndex"))
        if index is not None:
            try:
                self._index = int(index)
            except ValueError:
                logger.warning("Ignoring malformed stored questionIndex %r", index)
                self._index = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def questionnaire(self) -> Questionnaire:
        return self._quiz

    @property
    def profile(self) -> ProfileState:
        return self._profile

    @property
    def answers(self) -> dict[str, str]:
        return dict(self._answers)

    @property
    def current_step(self) -> str:
        return self._step

    @property
    def question_index(self) -> int:
        return self._index

    @property
    def result(self) -> ScoreResult | None:
        return self._result

    @property
    def derived(self) -> DerivedProfile:
        return derive_profile(self._profile)

    @property
    def route(self) -> str:
        return self.derived.route

    @property
    def questions(self) -> list[Question]:
        return eligible_questions(self._quiz, self.route)

    @property
    def current_question(self) -> Question | None:
        questions = self.questions
        if 0 <= self._index < len(questions):
            return questions[self._index]
        return None

    @property
    def progress(self) -> dict[str, Any]:
        """1-based position within the eligible questions."""
        total = len(self.questions)
        position = min(self._index + 1, total)
        return {
            "position": position,
            "total": total,
            "percent": (position / total) * 100 if total else 0.0,
        }

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def set_profile(self, profile: ProfileState) -> None:
        self._profile = profile
        self._save("profile", json.dumps(profile.to_dict()))

    def set_answer(self, question_id: str, letter: str) -> None:
        if letter not in LETTERS:
            raise ValueError(f"Answer must be one of {', '.join(LETTERS)}, got {letter!r}")
        self._answers[question_id] = letter
        self._save("answers", json.dumps(self._answers))

    def clear_answers(self) -> None:
        self._answers = {}
        self._result = None
        self._set_index(0)
        self._save("answers", json.dumps(self._answers))

    def _set_index(self, index: int) -> None:
        self._index = index
        self._save("questionIndex", str(index))

    def _set_step(self, step: str) -> None:
        self._step = step
        self._save("currentStep", step)

    def next_question(self) -> bool:
        """Advance one question. Returns False when already on the last one."""
        if self._index < len(self.questions) - 1:
            self._set_index(self._index + 1)
            return True
        return False

    def previous_question(self) -> bool:
        if self._index > 0:
            self._set_index(self._index - 1)
            return True
        return False

    def go_to_step(self, step: str) -> None:
        if step not in STEPS:
            raise ValueError(f"Unknown step {step!r}; expected one of {', '.join(STEPS)}")
        self._set_step(step)
        if step == "quiz":
            self._set_index(0)

    def submit(self) -> ScoreResult:
        """Score the current answers and move to the results step.

        Raises:
            NoAnswersError: Nothing eligible has been answered; the step is unchanged.
            NoBandMatchError: The questionnaire's bands have a gap.
        """
        result = score(self._quiz, self._answers, self.route)
        self._result = result
        self._set_step("results")
        return result

    def reset(self) -> None:
        """Forget everything and remove all persisted keys."""
        self._profile = ProfileState()
        self._answers = {}
        self._result = None
        self._step = "profile"
        self._index = 0
        for name in PERSISTED_FIELDS:
            self._store.remove(self.storage_key(name))
