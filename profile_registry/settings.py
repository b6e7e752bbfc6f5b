from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: you typically inject real env vars instead.
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )

    # Env vars:
    # - AUTH_SECRET (HMAC key for bearer tokens; set it in any real deployment)
    # - AUTH_TOKEN_TTL_SECONDS (optional)
    # - PROFILE_STORE_BACKEND: "memory" (default) or "json"
    # - PROFILE_STORE_PATH (used by the json backend)
    # - EVENT_LOG_PATH (optional JSONL ledger of registry events)
    # - LOG_LEVEL (optional)
    auth_secret: str = Field(default="dev-insecure-secret-change-me", validation_alias="AUTH_SECRET")
    auth_token_ttl_seconds: int = Field(default=60 * 60 * 24 * 7, validation_alias="AUTH_TOKEN_TTL_SECONDS")

    profile_store_backend: str = Field(default="memory", validation_alias="PROFILE_STORE_BACKEND")
    profile_store_path: str = Field(default="data/profiles.json", validation_alias="PROFILE_STORE_PATH")

    event_log_path: str = Field(default="", validation_alias="EVENT_LOG_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def model_post_init(self, __context):  # type: ignore[override]
        backend = (self.profile_store_backend or "").lower().strip()
        # Unknown backends fall back to memory rather than failing at startup.
        self.profile_store_backend = backend if backend in ("memory", "json") else "memory"


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
