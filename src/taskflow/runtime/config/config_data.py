"""Typed view of the ``config`` section of config.yaml.

Secrets are optional at parse time; a blank value counts as unset and
``ConfigData.missing_secrets`` reports what a deployment still lacks.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CORSConfig(BaseModel):
    """Browser origins allowed to call the API with credentials."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class AppConfig(BaseModel):
    """Process-level settings."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class TelegramConfig(BaseModel):
    """Telegram login widget and bot configuration."""

    bot_token: str | None = Field(
        default=None,
        description="Bot token; doubles as the login widget shared secret",
    )
    auth_max_age_seconds: int = Field(
        default=86400, description="Maximum age of a login assertion in seconds"
    )
    api_base_url: str = Field(
        default="https://api.telegram.org", description="Bot API base URL"
    )
    request_timeout_seconds: float = Field(
        default=10.0, description="Timeout for Bot API calls"
    )
    webhook_secret: str | None = Field(
        default=None,
        description="Expected X-Telegram-Bot-Api-Secret-Token on webhook calls",
    )

    @field_validator("bot_token", "webhook_secret")
    @classmethod
    def normalize_token(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class SessionConfig(BaseModel):
    """Session credential (JWT) configuration."""

    jwt_secret: str | None = Field(
        default=None, description="Secret for signing session JWTs"
    )
    ttl_seconds: int = Field(
        default=30 * 24 * 3600, description="Session credential lifetime (30 days)"
    )
    issuer: str = Field(default="taskflow", description="Issuer claim for session JWTs")
    algorithm: str = Field(default="HS256", description="Signing algorithm")
    cookie_name: str = Field(
        default="tf_token", description="Cookie that may carry the session JWT"
    )

    @field_validator("jwt_secret")
    @classmethod
    def normalize_secret(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class AuthConfig(BaseModel):
    """Caller identity resolution options."""

    allow_user_id_header: bool = Field(
        default=True,
        description="Accept X-User-Id (public identifier) when no valid token is sent",
    )


class LoggingConfig(BaseModel):
    """Loguru sink settings."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Rotated log files kept"
    )


class DatabaseConfig(BaseModel):
    """Account database connection."""

    url: str = Field(
        default="sqlite:///./taskflow.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Recycle connections older than this (seconds)")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    create_tables_on_startup: bool = Field(
        default=True, description="Create missing tables when the API starts"
    )

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def connection_string(self) -> str:
        """``url`` with the password from ``password_env_var`` filled in, if set."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if self.is_sqlite or not self.password_env_var:
            return self.url

        import os

        password = os.getenv(self.password_env_var)
        if not password:
            raise ValueError(f"Environment variable {self.password_env_var} not set")
        if base_url.password:
            logger.warning(
                "Database URL contains a password; using the one from {} instead",
                self.password_env_var,
            )
        return base_url.set(password=password).render_as_string(hide_password=False)


class ConfigData(BaseModel):
    """The whole ``config`` section."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    telegram: TelegramConfig = Field(
        default_factory=TelegramConfig, description="Telegram configuration"
    )
    session: SessionConfig = Field(
        default_factory=SessionConfig, description="Session credential configuration"
    )
    auth: AuthConfig = Field(
        default_factory=AuthConfig, description="Caller identity resolution"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )

    def missing_secrets(self) -> list[str]:
        """Names of required secrets that are not configured."""
        missing = []
        if not self.telegram.bot_token:
            missing.append("telegram.bot_token")
        if not self.session.jwt_secret:
            missing.append("session.jwt_secret")
        return missing
