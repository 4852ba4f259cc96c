"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
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

# Only load from file if it exists (production injects via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_sheets_settings() -> "SheetsSettings":
    return SheetsSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client submission rate limiting",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of submissions allowed per client per window",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        3600,
        description="Sliding window size in seconds",
        ge=1,
    )
    rate_limit_sweep_interval_seconds: int = Field(
        3600,
        description="How often idle clients are evicted from limiter memory",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        False,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    trust_proxy_headers: bool = Field(
        True,
        description=(
            "Derive the client id from X-Forwarded-For / X-Real-IP. "
            "When false the socket peer address is used."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class SheetsSettings(BaseSettings):
    """Google Sheets sink configuration.

    Credentials are those of a service account that has edit access to the
    target spreadsheet. All three of ``service_account_email``,
    ``private_key`` and ``sheet_id`` are needed for appends to succeed; the
    sink reports a missing value at append time rather than at startup.
    """

    service_account_email: str | None = Field(
        None,
        description="Service account client email",
    )
    private_key: str | None = Field(
        None,
        description="PEM private key; literal '\\n' sequences are expanded",
    )
    sheet_id: str | None = Field(
        None,
        description="Target spreadsheet id",
    )
    sheet_range: str = Field(
        "Sheet1!A:D",
        description="A1 range rows are appended to",
    )
    value_input_option: str = Field(
        "USER_ENTERED",
        description="How Sheets interprets appended values (RAW or USER_ENTERED)",
    )
    token_uri: str = Field(
        "https://oauth2.googleapis.com/token",
        description="OAuth2 token endpoint for the service account",
    )
    api_base_url: str = Field(
        "https://sheets.googleapis.com/v4",
        description="Sheets REST API base URL",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        case_sensitive=False,
    )

    @field_validator("private_key")
    @classmethod
    def _expand_newlines(cls, value: str | None) -> str | None:
        # Keys pasted into a single env var usually carry escaped newlines
        if value is None:
            return None
        return value.replace("\\n", "\n")


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    sheets: SheetsSettings = Field(default_factory=_build_sheets_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
