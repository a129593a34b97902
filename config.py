"""
Configuration settings for the Lingo Mini quiz client.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Course Service (backend)
    # ========================================
    backend_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the Lingo Mini backend",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout for a single backend request",
    )
    retry_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts for idempotent GET requests (answer checks are never retried)",
    )

    # ========================================
    # Session Rules
    # ========================================
    points_per_correct: int = Field(
        default=10,
        ge=0,
        description="XP awarded for each correct answer",
    )
    strict_transitions: bool = Field(
        default=False,
        description="Raise InvalidTransition instead of ignoring invalid calls",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def get_service_config(self) -> dict[str, Any]:
        """Get course service client parameters as a dictionary."""
        return {
            "base_url": self.backend_url,
            "timeout_seconds": self.request_timeout_seconds,
            "retry_attempts": self.retry_attempts,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
