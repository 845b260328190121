"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces
configuration values from the environment, ``.env`` files and programmatic
overrides into the correct types with proper defaults.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grocer_client.constants import (
    DEFAULT_BASE_URL,
    LOGIN_PATH,
    LOGOUT_PATH,
    NETWORK_TIMEOUT,
    OK_CODE,
    REFRESH_PATH,
    SESSION_EXPIRED_CODE,
)

FIELD_ORDER = (
    "base_url",
    "timeout_seconds",
    "ok_code",
    "session_expired_code",
    "refresh_path",
    "logout_path",
    "login_path",
    "renewal_timeout_seconds",
)


class ClientSettings(BaseSettings):
    """Pydantic settings schema for the storefront client.

    Integrates with environment variables using the GROCER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="GROCER_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Root URL of the storefront REST API",
        min_length=1,
    )

    timeout_seconds: float = Field(
        default=NETWORK_TIMEOUT,
        description="Per-request network timeout in seconds",
        gt=0,
    )

    ok_code: int = Field(
        default=OK_CODE,
        description="Envelope code that marks a successful call",
    )

    session_expired_code: int = Field(
        default=SESSION_EXPIRED_CODE,
        description="Envelope code that signals an expired access credential",
    )

    refresh_path: str = Field(default=REFRESH_PATH, description="Session renew endpoint")
    logout_path: str = Field(default=LOGOUT_PATH, description="Session terminate endpoint")
    login_path: str = Field(
        default=LOGIN_PATH,
        description="Where the user is sent when the session cannot be renewed",
    )

    renewal_timeout_seconds: float | None = Field(
        default=None,
        description="Optional upper bound on the renewal call; unbounded when unset",
        gt=0,
    )

    # --- Validation Rules ---

    @field_validator("refresh_path", "logout_path", "login_path")
    @classmethod
    def require_absolute_path(cls, v: str) -> str:
        """Endpoint paths are resolved against base_url and must start with '/'."""
        if not v.startswith("/"):
            raise ValueError(f"must start with '/', got {v!r}")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") or v

    @model_validator(mode="after")
    def validate_distinct_codes(self) -> "ClientSettings":
        """The success code and the session-expired code must differ."""
        if self.ok_code == self.session_expired_code:
            raise ValueError(
                "ok_code and session_expired_code must differ "
                f"(both are {self.ok_code})"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary keyed by field name."""
        return {name: getattr(self, name) for name in FIELD_ORDER}
