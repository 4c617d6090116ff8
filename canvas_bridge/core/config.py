"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the service layer and the
operator scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class CanvasSettings(BaseSettings):
    """Configuration required for interacting with the Canvas instance."""

    base_url: str = Field(..., validation_alias="CANVAS_BASE_URL")
    client_id: str = Field(..., validation_alias="CANVAS_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="CANVAS_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="CANVAS_REDIRECT_URI")
    request_timeout_seconds: float = Field(
        10.0,
        validation_alias="CANVAS_REQUEST_TIMEOUT",
        gt=0,
        description="Upper bound for every individual Canvas request.",
    )
    source_timeout_seconds: float = Field(
        30.0,
        validation_alias="CANVAS_SOURCE_TIMEOUT",
        gt=0,
        description="Upper bound for fetching one quiz source of one course, all pages included.",
    )
    page_size: int = Field(100, validation_alias="CANVAS_PAGE_SIZE", ge=1, le=100)
    max_pages: int = Field(
        20,
        validation_alias="CANVAS_MAX_PAGES",
        ge=1,
        description="Stop following pagination links after this many pages.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        """Canvas paths are appended directly, so keep the base bare."""
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("CANVAS_BASE_URL must include the protocol.")
        return value


class SessionSettings(BaseSettings):
    """Encrypted session cookie configuration."""

    secret: str = Field(
        ...,
        validation_alias="SESSION_SECRET",
        min_length=32,
        description="Symmetric key material for the session cookie. Rotate to revoke.",
    )
    cookie_name: str = Field("gfh_session", validation_alias="SESSION_COOKIE_NAME")
    ttl_seconds: int = Field(
        60 * 60 * 24 * 7, validation_alias="SESSION_TTL_SECONDS", gt=0
    )


class OAuthSettings(BaseSettings):
    """Anti-forgery state configuration for the OAuth flow."""

    state_cookie_name: str = Field(
        "canvas_oauth_state", validation_alias="OAUTH_STATE_COOKIE_NAME"
    )
    state_ttl_seconds: int = Field(
        600, validation_alias="OAUTH_STATE_TTL", gt=0, le=600
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    credential_db_path: str = Field(
        "data/credentials.db", validation_alias="CREDENTIAL_DB_PATH"
    )
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting users back to the front-end.",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    canvas: CanvasSettings = Field(default_factory=CanvasSettings)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "CanvasSettings",
    "OAuthSettings",
    "SecuritySettings",
    "SessionSettings",
    "get_settings",
]
