"""Audit logger — records quiz events without storing raw answers.

Every scoring call and session change can be written to the ``audit_log``
table. Answers and profile input are health-adjacent data, so only a
SHA-256 hash of their canonical JSON is kept:

* ``answers_hash``: hash of the answers mapping (or profile) involved.
* ``answer_count``: how many answers were supplied.
* ``score`` / ``band``: the outcome, when the event produced one.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from facebloat.core.storage.database import QuizDatabase

logger = logging.getLogger(__name__)


def _hash_input(data: Any) -> str:
    """SHA-256 hash of canonical JSON.

    Returns:
        Hex-encoded SHA-256 digest, or empty string when ``data`` is not
        JSON-serializable.
    """
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()
    except (TypeError, ValueError):
        return ""


@dataclass
class AuditEvent:
    """A single audit log entry."""

    action: str                          # 'score' | 'submit' | 'reset' | 'profile_saved' | 'answer_saved'
    session_id: str | None = None
    questionnaire_version: str | None = None
    route: str | None = None
    answers_hash: str = ""
    answer_count: int | None = None
    score: int | None = None
    band: str | None = None
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Records audit events to the ``audit_log`` SQLite table.

    All writes are committed immediately. A failed write is logged and
    reported as an empty event id; it never interrupts the quiz.

    Usage::

        audit = AuditLogger(quiz_db)
        audit.log_quiz_event(
            "score",
            questionnaire_version="1",
            route="female",
            answers={"sleep_hours": "C"},
            score=42,
            band="moderate",
        )
    """

    def __init__(self, database: QuizDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        """Insert an audit event and return its UUID (empty on failure)."""
        event_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()

        metadata_json = (
            json.dumps(event.metadata, separators=(",", ":"))
            if event.metadata
            else None
        )

        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, session_id, questionnaire_version, route,
                    answers_hash, answer_count, score, band, duration_ms, status,
                    error_type, metadata_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    now,
                    event.action,
                    event.session_id,
                    event.questionnaire_version,
                    event.route,
                    event.answers_hash or None,
                    event.answer_count,
                    event.score,
                    event.band,
                    event.duration_ms,
                    event.status,
                    event.error_type,
                    metadata_json,
                ),
            )
            conn.commit()
        except Exception:
            logger.exception("Failed to write audit event — event lost")
            return ""

        return event_id

    def log_quiz_event(
        self,
        action: str,
        *,
        session_id: str | None = None,
        questionnaire_version: str | None = None,
        route: str | None = None,
        answers: Any = None,
        score: int | None = None,
        band: str | None = None,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Convenience wrapper for logging a quiz event.

        Args:
            action: Event kind ('score', 'submit', 'reset', ...).
            session_id: Session the event belongs to, if any.
            questionnaire_version: Version of the questionnaire in use.
            route: 'male' or 'female'.
            answers: Answers or profile data (hashed, never stored raw).
            score: Final score, when one was produced.
            band: Band tag, when one was resolved.
            duration_ms: Execution duration in milliseconds.
            status: 'success' or 'failure'.
            error_type: Exception class name on failure.
            metadata: Additional non-sensitive metadata.

        Returns:
            The generated event ID.
        """
        return self.log_event(AuditEvent(
            action=action,
            session_id=session_id,
            questionnaire_version=questionnaire_version,
            route=route,
            answers_hash=_hash_input(answers) if answers else "",
            answer_count=len(answers) if isinstance(answers, dict) else None,
            score=score,
            band=band,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        session_id: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Query audit events with optional filters, newest first."""
        conditions: list[str] = []
        params: list[Any] = []

        if action:
            conditions.append("action = ?")
            params.append(action)
        if session_id:
            conditions.append("session_id = ?")
            params.append(session_id)
        if since:
            conditions.append("timestamp >= ?")
            params.append(since)

        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        query = f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, action: str | None = None) -> int:
        """Count audit events, optionally of a single action."""
        if action:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM audit_log WHERE action = ?", (action,)
            ).fetchone()
        else:
            row = self._db.connection.execute("SELECT COUNT(*) FROM audit_log").fetchone()
        return row[0]
