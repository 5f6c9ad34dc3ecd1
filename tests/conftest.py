"""Shared test fixtures for face bloat quiz tests."""

from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("QUESTIONNAIRE_PATH", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from facebloat.domains.quiz.domain_logic.loader import (  # noqa: E402
    load_default_questionnaire,
    load_questionnaire,
)
from facebloat.domains.quiz.domain_logic.models import Questionnaire  # noqa: E402


def _option(letter: str, points: float) -> dict[str, Any]:
    return {
        "letter": letter,
        "title": f"Option {letter}",
        "points": points,
        "context": f"Coaching for {letter}",
    }


# Two categories, one question each, points 0 / 3.5 / 7.
# Male weights: cat_a 60, cat_b 40. Female weights: 50 / 50.
_TWO_CATEGORY_RAW: dict[str, Any] = {
    "version": "test",
    "letterPoints": {"A": 0, "B": 1, "C": 2, "D": 3, "E": 4, "F": 5, "G": 6, "H": 7},
    "scoreBands": [
        {"min": 0, "max": 24, "band": "low", "label": "Low risk", "blurb": "Low."},
        {"min": 25, "max": 49, "band": "moderate", "label": "Moderate risk", "blurb": "Moderate."},
        {"min": 50, "max": 74, "band": "elevated", "label": "Elevated risk", "blurb": "Elevated."},
        {"min": 75, "max": 100, "band": "high", "label": "High risk", "blurb": "High."},
    ],
    "categories": [
        {"id": "cat_a", "label": "Category A"},
        {"id": "cat_b", "label": "Category B"},
    ],
    "categoryWeights": {
        "male": {"cat_a": 60, "cat_b": 40},
        "female": {"cat_a": 50, "cat_b": 50},
    },
    "profile": {
        "fields": [
            {
                "id": "menstruates",
                "label": "Menstruates?",
                "type": "select",
                "options": [{"value": "yes", "label": "Yes"}, {"value": "no", "label": "No"}],
            },
            {"id": "height", "label": "Height", "type": "input"},
        ]
    },
    "questions": [
        {
            "id": "qa",
            "appliesTo": "all",
            "categoryId": "cat_a",
            "text": "Question A?",
            "acute": False,
            "options": [_option("A", 0), _option("D", 3.5), _option("H", 7)],
        },
        {
            "id": "qb",
            "appliesTo": "all",
            "categoryId": "cat_b",
            "text": "Question B?",
            "acute": True,
            "options": [_option("A", 0), _option("D", 3.5), _option("H", 7)],
        },
    ],
}


def _make_question(
    qid: str,
    category_id: str,
    *,
    applies_to: str = "all",
    points: tuple[tuple[str, float], ...] = (("A", 0), ("D", 3.5), ("H", 7)),
    within_category_weight: dict[str, float] | None = None,
) -> dict[str, Any]:
    question: dict[str, Any] = {
        "id": qid,
        "appliesTo": applies_to,
        "categoryId": category_id,
        "text": f"Question {qid}?",
        "acute": False,
        "options": [_option(letter, value) for letter, value in points],
    }
    if within_category_weight is not None:
        question["withinCategoryWeight"] = within_category_weight
    return question


@pytest.fixture
def raw_questionnaire() -> dict[str, Any]:
    """Fresh, mutable copy of the two-category definition."""
    return copy.deepcopy(_TWO_CATEGORY_RAW)


@pytest.fixture
def make_question():
    """Factory for raw question dicts (options A=0, D=3.5, H=7 by default)."""
    return _make_question


@pytest.fixture
def two_category_quiz() -> Questionnaire:
    """The two-category questionnaire (A weight 60, B weight 40 on male)."""
    return load_questionnaire(copy.deepcopy(_TWO_CATEGORY_RAW))


@pytest.fixture
def bundled_quiz() -> Questionnaire:
    """The questionnaire shipped with the package."""
    return load_default_questionnaire()


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_store():
    from facebloat.core.storage.kv import InMemoryStore

    return InMemoryStore()


@pytest.fixture
def quiz_db():
    """Create an in-memory QuizDatabase for testing."""
    from facebloat.core.storage.database import QuizDatabase

    db = QuizDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from facebloat.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def sqlite_store(quiz_db, field_encryptor):
    """Create an encrypted SQLiteStore backed by in-memory SQLite."""
    from facebloat.core.storage.kv import SQLiteStore

    return SQLiteStore(quiz_db, field_encryptor)


@pytest.fixture
def audit_logger(quiz_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from facebloat.core.audit.logger import AuditLogger

    return AuditLogger(quiz_db)
