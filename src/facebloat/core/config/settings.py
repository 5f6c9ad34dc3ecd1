"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Face bloat quiz server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: there is no auth layer in front of the quiz tools.
    facebloat_host: str = "127.0.0.1"
    facebloat_port: int = 8001
    facebloat_log_level: str = "info"
    facebloat_allow_insecure_bind: bool = False

    # Questionnaire definition; empty means the bundled facebloat.quiz.yaml
    questionnaire_path: str = ""

    # Session storage
    storage_backend: Literal["memory", "sqlite"] = "memory"
    db_path: str = "~/.facebloat/quiz.db"
    storage_namespace: str = "facebloat"

    # Encryption of stored values (empty = plaintext)
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
