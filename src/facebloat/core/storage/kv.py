"""Key-value stores for in-progress quiz state.

The quiz flow persists one text blob per logical field under a namespaced key.
It only needs get/set/remove, so any backend satisfying ``KeyValueStore`` can
be injected. The scoring engine never touches a store.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from facebloat.core.storage.database import QuizDatabase
from facebloat.core.storage.encryption import EncryptionError, FieldEncryptor

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String-keyed text storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is a no-op."""
        ...


class InMemoryStore:
    """Dict-backed store. Used by tests and when persistence is disabled."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SQLiteStore:
    """Store backed by the ``kv_store`` table, optionally encrypted at rest.

    Usage::

        db = QuizDatabase(":memory:")
        db.initialize()
        store = SQLiteStore(db, FieldEncryptor(key))
        store.set("facebloat:answers:v1", '{"q1":"A"}')
    """

    def __init__(self, database: QuizDatabase, encryptor: FieldEncryptor | None = None) -> None:
        self._db = database
        self._enc = encryptor

    def get(self, key: str) -> str | None:
        row = self._db.connection.execute(
            "SELECT value, encrypted FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        if row["encrypted"]:
            if self._enc is None:
                logger.warning("Value for %s is encrypted but no key is configured", key)
                return None
            try:
                return self._enc.decrypt(row["value"])
            except EncryptionError:
                logger.warning("Value for %s cannot be decrypted with the configured key", key)
                return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        stored = self._enc.encrypt(value) if self._enc is not None else value
        conn = self._db.connection
        conn.execute(
            """INSERT INTO kv_store (key, value, encrypted, updated_at)
               VALUES (?, ?, ?, datetime('now'))
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   encrypted = excluded.encrypted,
                   updated_at = excluded.updated_at""",
            (key, stored, 1 if self._enc is not None else 0),
        )
        conn.commit()

    def remove(self, key: str) -> None:
        conn = self._db.connection
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()

    def keys(self, prefix: str = "") -> list[str]:
        rows = self._db.connection.execute(
            "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
            (prefix.replace("%", r"\%").replace("_", r"\_") + "%",),
        ).fetchall()
        return [row["key"] for row in rows]
