"""Tests for the key-value stores behind quiz sessions."""

from __future__ import annotations

import pytest

from facebloat.core.storage.kv import InMemoryStore, KeyValueStore, SQLiteStore


class TestProtocol:
    def test_in_memory_store_satisfies_protocol(self):
        assert isinstance(InMemoryStore(), KeyValueStore)

    def test_sqlite_store_satisfies_protocol(self, quiz_db):
        assert isinstance(SQLiteStore(quiz_db), KeyValueStore)


@pytest.fixture(params=["memory", "sqlite_plain", "sqlite_encrypted"])
def store(request, quiz_db, field_encryptor):
    if request.param == "memory":
        return InMemoryStore()
    if request.param == "sqlite_plain":
        return SQLiteStore(quiz_db)
    return SQLiteStore(quiz_db, field_encryptor)


class TestStoreContract:
    def test_missing_key_returns_none(self, store):
        assert store.get("facebloat:answers:v1") is None

    def test_set_then_get(self, store):
        store.set("facebloat:answers:v1", '{"qa":"H"}')
        assert store.get("facebloat:answers:v1") == '{"qa":"H"}'

    def test_set_overwrites(self, store):
        store.set("k", "first")
        store.set("k", "second")
        assert store.get("k") == "second"

    def test_remove(self, store):
        store.set("k", "v")
        store.remove("k")
        assert store.get("k") is None

    def test_remove_absent_key_is_noop(self, store):
        store.remove("never-set")
        assert store.get("never-set") is None


class TestInMemoryStore:
    def test_keys_sorted_and_len(self):
        store = InMemoryStore()
        store.set("b", "2")
        store.set("a", "1")
        assert store.keys() == ["a", "b"]
        assert len(store) == 2


class TestSQLiteStore:
    def test_values_encrypted_at_rest(self, quiz_db, sqlite_store):
        sqlite_store.set("facebloat:profile:v1", '{"menstruates":"yes"}')
        row = quiz_db.connection.execute(
            "SELECT value, encrypted FROM kv_store WHERE key = ?", ("facebloat:profile:v1",)
        ).fetchone()
        assert row["encrypted"] == 1
        assert "menstruates" not in row["value"]

    def test_plaintext_without_encryptor(self, quiz_db):
        store = SQLiteStore(quiz_db)
        store.set("k", "plain")
        row = quiz_db.connection.execute(
            "SELECT value, encrypted FROM kv_store WHERE key = 'k'"
        ).fetchone()
        assert row["encrypted"] == 0
        assert row["value"] == "plain"

    def test_encrypted_value_unreadable_without_key(self, quiz_db, sqlite_store, caplog):
        sqlite_store.set("k", "secret")
        assert SQLiteStore(quiz_db).get("k") is None
        assert "no key is configured" in caplog.text

    def test_value_from_another_key_reads_as_missing(self, quiz_db, sqlite_store, caplog):
        from facebloat.core.storage.encryption import FieldEncryptor

        sqlite_store.set("k", "secret")
        rotated = SQLiteStore(quiz_db, FieldEncryptor(FieldEncryptor.generate_key()))
        assert rotated.get("k") is None
        assert "cannot be decrypted" in caplog.text

    def test_upsert_keeps_single_row(self, quiz_db, sqlite_store):
        sqlite_store.set("k", "1")
        sqlite_store.set("k", "2")
        count = quiz_db.connection.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0]
        assert count == 1

    def test_keys_by_prefix(self, sqlite_store):
        sqlite_store.set("facebloat:s1:answers:v1", "{}")
        sqlite_store.set("facebloat:s1:profile:v1", "{}")
        sqlite_store.set("facebloat:s2:answers:v1", "{}")
        assert sqlite_store.keys("facebloat:s1:") == [
            "facebloat:s1:answers:v1",
            "facebloat:s1:profile:v1",
        ]

    def test_keys_prefix_treats_wildcards_literally(self, sqlite_store):
        sqlite_store.set("a_b:x", "1")
        sqlite_store.set("aXb:x", "1")
        assert sqlite_store.keys("a_b") == ["a_b:x"]

    def test_survives_reopen(self, tmp_path, field_encryptor):
        from facebloat.core.storage.database import QuizDatabase

        path = str(tmp_path / "quiz.db")
        with QuizDatabase(path) as db:
            SQLiteStore(db, field_encryptor).set("k", "kept")
        with QuizDatabase(path) as db:
            assert SQLiteStore(db, field_encryptor).get("k") == "kept"
