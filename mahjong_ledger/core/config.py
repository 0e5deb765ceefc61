"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (containers inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_store_settings() -> "StoreSettings":
    """Build remote store settings from environment.

    Static type checkers treat fields without defaults as required constructor
    arguments, which is not how BaseSettings is meant to be used.
    """

    return StoreSettings()  # type: ignore[call-arg]


def _build_auth_settings() -> "AuthSettings":
    return AuthSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class StoreSettings(BaseSettings):
    """Supabase (PostgREST) connection configuration."""

    url: str | None = Field(
        None,
        description="Supabase project URL (e.g., https://xyz.supabase.co)",
    )
    key: str | None = Field(
        None,
        description="Supabase service role or anon key",
    )
    timeout_seconds: float = Field(
        10.0,
        description="PostgREST request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Shared-secret authentication configuration.

    Only the super-admin secret lives here. The sub-admin secret is stored in
    the remote ``settings`` table and managed at runtime.
    """

    password: str = Field(
        "888888",
        description="Static super-admin secret compared against X-Admin-Token",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMIN_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    store_provider: Literal["supabase", "memory"] = Field(
        "supabase",
        description="Remote store backend; anything else fails at startup",
    )
    sub_admin_cooldown_seconds: int = Field(
        600,
        description="Minimum interval between successful sub-admin record writes",
        ge=1,
    )
    cors_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(0, description="Rotate log file after this many bytes (0 disables)")
    backup_count: int = Field(3, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    store: StoreSettings = Field(default_factory=_build_store_settings)
    auth: AuthSettings = Field(default_factory=_build_auth_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
