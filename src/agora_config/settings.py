"""Agora configuration.

Every value comes from an environment variable of the same name in upper
case (``JWT_SECRET_KEY``, ``RATE_LIMIT_LOGIN_MAX_ATTEMPTS``, ...). Real
environment variables win over .env files, which are layered from lowest
to highest priority:

- ``config/.env``       shared / production defaults
- ``config/.env.dev``   local development overrides
- ``$AGORA_ENV_FILE``   explicit file, absolute or relative to the project root
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_JWT_SECRET_LENGTH = 32

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_DIR = PROJECT_ROOT / "config"


def env_files() -> tuple[Path, ...]:
    """Existing .env files in ascending priority (later files override earlier)."""
    candidates = [CONFIG_DIR / ".env", CONFIG_DIR / ".env.dev"]

    explicit = os.environ.get("AGORA_ENV_FILE")
    if explicit:
        path = Path(explicit)
        candidates.append(path if path.is_absolute() else PROJECT_ROOT / path)

    return tuple(path for path in candidates if path.is_file())


class Settings(BaseSettings):
    """Typed settings for the auth service and its HTTP API.

    Construction fails when ``JWT_SECRET_KEY`` or ``POSTGRES_PASSWORD`` is
    missing, or when the signing secret is too short.
    """

    model_config = SettingsConfigDict(
        env_file=env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required secrets
    jwt_secret_key: SecretStr
    postgres_password: SecretStr

    app_name: str = "Agora"
    debug: bool = False
    log_level: str = "INFO"

    # Tokens
    jwt_access_token_expire_minutes: int = 15
    jwt_refresh_token_expire_days: int = 7
    jwt_refresh_token_rotation: bool = False

    # Passwords
    password_bcrypt_rounds: int = 12
    password_require_complexity: bool = True

    # Single-use account tokens
    password_reset_token_expire_minutes: int = 60
    email_verification_token_expire_hours: int = 24

    # Attempts per client and window
    rate_limit_login_max_attempts: int = 5
    rate_limit_login_window_seconds: int = 15 * 60
    rate_limit_register_max_attempts: int = 3
    rate_limit_register_window_seconds: int = 60 * 60
    # Shared by reset and verification requests, counted per purpose
    rate_limit_password_reset_max_attempts: int = 3
    rate_limit_password_reset_window_seconds: int = 60 * 60

    # Storage
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_db: str = "agora"
    redis_url: str | None = None  # unset: per-process rate limit counters

    # HTTP API
    api_cors_origins: str = ""  # comma-separated; empty disables CORS
    api_cookie_secure: bool = True
    api_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    api_cookie_domain: str | None = None
    api_trust_proxy_headers: bool = False

    @field_validator("jwt_secret_key")
    @classmethod
    def _check_secret_length(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value()) < MIN_JWT_SECRET_LENGTH:
            msg = f"JWT secret key must be at least {MIN_JWT_SECRET_LENGTH} characters"
            raise ValueError(msg)
        return value

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _join_origins(cls, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ",".join(value)
        return value or ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """asyncpg connection URL built from the ``POSTGRES_*`` values."""
        password = self.postgres_password.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.api_cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()  # type: ignore[call-arg]


def clear_settings_cache() -> None:
    """Forget the loaded settings so the next call re-reads the environment."""
    get_settings.cache_clear()
