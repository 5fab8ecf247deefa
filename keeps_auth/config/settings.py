"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Keeps"
    environment: Literal["development", "test", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Identity provider
    identity_backend: Literal["firebase", "memory"] = "firebase"
    firebase_api_key: str = ""
    firebase_project_id: str = ""
    firebase_service_account: SecretStr = SecretStr("")  # stringified service account JSON

    # Email sender
    email_backend: Literal["resend", "console"] = "resend"
    resend_api_key: SecretStr = SecretStr("")
    email_from: str = "Keeps <onboarding@mail.resend.dev>"

    # Verification links land here; must be an authorized domain
    continue_url: str = "http://localhost:5173/login"

    # HTTP boundary
    cors_allow_origin: str = "http://localhost:5173"
    verification_api_url: str = "http://localhost:8000"

    # Client controller
    operation_timeout_seconds: float = 30.0
    # DEV ONLY: lets unverified accounts in; ignored unless ENVIRONMENT=development is set
    allow_unverified_login: bool = False

    @property
    def is_development(self) -> bool:
        """True only when ENVIRONMENT was set to development, not left at its default."""
        return self.environment == "development" and "environment" in self.model_fields_set

    @property
    def dev_bypass_active(self) -> bool:
        """Dev bypass is honoured only when enabled AND explicitly running in development."""
        return self.allow_unverified_login and self.is_development

    @model_validator(mode="after")
    def check_production_safety(self) -> "Settings":
        """
        Validate settings that must never reach production.

        Checks:
        - Operation timeout must be positive
        - ALLOW_UNVERIFIED_LOGIN must be off in production
        """
        if self.operation_timeout_seconds <= 0:
            msg = (
                "OPERATION_TIMEOUT_SECONDS must be positive. "
                f"Got: {self.operation_timeout_seconds}"
            )
            raise ValueError(msg)
        if self.environment == "production" and self.allow_unverified_login:
            msg = (
                "ALLOW_UNVERIFIED_LOGIN must not be set in production. "
                "It lets unverified accounts reach the protected area."
            )
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
