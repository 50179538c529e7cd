"""
clinic_auth.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for persistence, sessions and password hashing.
- Hide secrets from repr/logging (session signing key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SESSION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLINIC_AUTH_", case_sensitive=False)

    # Environment controls cookie hardening and auto-init of DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "clinic-auth"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 5000

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./clinic_auth.db"

    # Sessions
    session_secret: str = Field(default="dev-session-secret-change-me", repr=False)
    session_cookie_name: str = "clinic.sid"
    session_ttl_seconds: int = Field(default=24 * 60 * 60, ge=60)

    # Upper bound on concurrent password hashes (worker threads).
    hash_workers: int = Field(default=4, ge=1)

    @property
    def cookie_secure(self) -> bool:
        return self.env == "prod"

    @property
    def cookie_samesite(self) -> Literal["lax", "none"]:
        # Cross-site SPA deployments need SameSite=None, which browsers only accept with Secure.
        return "none" if self.env == "prod" else "lax"

    @property
    def session_secret_is_weak(self) -> bool:
        return len(self.session_secret) < MIN_SESSION_SECRET_LENGTH


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly and pass it to `create_app`, bypassing the cache.
