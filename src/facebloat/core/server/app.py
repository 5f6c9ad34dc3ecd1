"""Face Bloat Quiz MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging
import sqlite3

from fastmcp import FastMCP

from facebloat.core.audit.logger import AuditLogger
from facebloat.core.config.settings import Settings, get_settings
from facebloat.core.storage.database import QuizDatabase
from facebloat.core.storage.encryption import EncryptionError, FieldEncryptor
from facebloat.core.storage.kv import InMemoryStore, KeyValueStore, SQLiteStore
from facebloat.domains.quiz.domain_logic.loader import (
    load_default_questionnaire,
    load_questionnaire_file,
)
from facebloat.domains.quiz.domain_logic.models import Questionnaire
from facebloat.domains.quiz.domain_logic.validator import report_integrity
from facebloat.domains.quiz.resources.questionnaire import register_questionnaire_resources
from facebloat.domains.quiz.tools.quiz_tools import register_quiz_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Face Bloat Quiz"
SERVER_VERSION = "0.1.0"


def _load_questionnaire(settings: Settings) -> Questionnaire:
    # Validation errors propagate: the server must not start on a bad definition.
    if settings.questionnaire_path:
        return load_questionnaire_file(settings.questionnaire_path)
    return load_default_questionnaire()


def _create_storage(settings: Settings) -> tuple[KeyValueStore, QuizDatabase | None]:
    """Build the configured session store, falling back to memory on failure."""
    if settings.storage_backend != "sqlite":
        logger.info("Using in-memory session store (state is lost on restart)")
        return InMemoryStore(), None

    try:
        encryptor = FieldEncryptor(settings.encryption_key) if settings.encryption_key else None
        database = QuizDatabase(settings.db_path)
        database.initialize()
    except (EncryptionError, sqlite3.Error, OSError) as exc:
        logger.error("Failed to initialize storage: %s", exc)
        logger.warning("Continuing with in-memory session store")
        return InMemoryStore(), None

    if encryptor is None:
        logger.warning("No ENCRYPTION_KEY configured; profile answers are stored in plaintext")
    logger.info(
        "Session store initialized: %s (schema v%d)",
        settings.db_path,
        database.get_schema_version(),
    )
    return SQLiteStore(database, encryptor), database


def create_app(
    *,
    questionnaire_override: Questionnaire | None = None,
    store_override: KeyValueStore | None = None,
    audit_logger_override: AuditLogger | None = None,
) -> FastMCP:
    """Create and configure the quiz MCP server.

    This is the main application factory. It:
    1. Loads and validates the questionnaire (fatal on error)
    2. Logs any integrity problems in the questionnaire data
    3. Initializes the session store (memory or SQLite)
    4. Registers tools and resources
    """
    settings = get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Face bloat risk quiz. Fetch the questions for a user's route, collect "
            "one lettered answer per question, then score the answers to get a "
            "0-100 risk score, a risk band, the top contributing categories and "
            "per-answer coaching."
        ),
    )

    # --- Questionnaire ---
    questionnaire = questionnaire_override or _load_questionnaire(settings)
    problems = report_integrity(questionnaire)
    if problems:
        logger.warning("Questionnaire v%s has %d integrity problems", questionnaire.version, problems)

    # --- Storage ---
    database: QuizDatabase | None = None
    if store_override is not None:
        store = store_override
    else:
        store, database = _create_storage(settings)

    audit_logger = audit_logger_override
    if audit_logger is None and database is not None:
        audit_logger = AuditLogger(database)

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "questionnaire_version": questionnaire.version,
            "question_count": len(questionnaire.questions),
            "integrity_problems": problems,
            "storage_backend": type(store).__name__,
            "audit_enabled": audit_logger is not None,
        }

    register_quiz_tools(
        server,
        questionnaire,
        store,
        namespace=settings.storage_namespace,
        audit_logger=audit_logger,
    )
    logger.info("Quiz tools registered")

    register_questionnaire_resources(server, questionnaire)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
