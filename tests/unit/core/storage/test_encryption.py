"""Tests for the FieldEncryptor (Fernet encryption of stored quiz values)."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from facebloat.core.storage.encryption import EncryptionError, FieldEncryptor


@pytest.fixture
def key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def encryptor(key: str) -> FieldEncryptor:
    return FieldEncryptor(key)


class TestRoundTrip:
    def test_json_text_round_trip(self, encryptor: FieldEncryptor):
        data = '{"menstruates":"yes","height":170}'
        token = encryptor.encrypt(data)
        assert isinstance(token, str)
        assert token != data
        assert encryptor.decrypt(token) == data

    def test_unicode_round_trip(self, encryptor: FieldEncryptor):
        data = "Salt & Diet 🍽️"
        assert encryptor.decrypt(encryptor.encrypt(data)) == data

    def test_empty_string_round_trip(self, encryptor: FieldEncryptor):
        assert encryptor.decrypt(encryptor.encrypt("")) == ""


class TestKeyValidation:
    def test_empty_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            FieldEncryptor("")

    def test_whitespace_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            FieldEncryptor("   ")

    def test_invalid_key_raises(self):
        with pytest.raises(EncryptionError, match="Invalid encryption key"):
            FieldEncryptor("not-a-valid-fernet-key")


class TestCorruptData:
    def test_wrong_key_cannot_decrypt(self, encryptor: FieldEncryptor):
        token = encryptor.encrypt('{"sleep_hours":"D"}')
        other = FieldEncryptor(Fernet.generate_key().decode())
        with pytest.raises(EncryptionError, match="invalid token"):
            other.decrypt(token)

    def test_tampered_token_raises(self, encryptor: FieldEncryptor):
        token = encryptor.encrypt("quiz")
        with pytest.raises(EncryptionError):
            encryptor.decrypt(token[:-5] + "XXXXX")

    def test_garbage_token_raises(self, encryptor: FieldEncryptor):
        with pytest.raises(EncryptionError):
            encryptor.decrypt("not-a-valid-token")


class TestGenerateKey:
    def test_generates_valid_key(self):
        key = FieldEncryptor.generate_key()
        assert isinstance(key, str)
        assert len(key) == 44  # base64-encoded 32 bytes

    def test_generated_key_works(self):
        enc = FieldEncryptor(FieldEncryptor.generate_key())
        assert enc.decrypt(enc.encrypt("quiz")) == "quiz"

    def test_each_key_is_unique(self):
        keys = {FieldEncryptor.generate_key() for _ in range(10)}
        assert len(keys) == 10
