"""Application configuration settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_title: str = "Shortlinks"
    app_version: str = "0.1.0"
    app_description: str = "In-memory URL shortening service with click analytics"

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL used when building short links",
    )

    # URL Shortener
    default_validity_minutes: int = Field(default=30, ge=1)
    max_validity_minutes: int = Field(default=525600, ge=1)
    short_code_length: int = Field(default=6, ge=1, le=20)
    max_short_code_length: int = 20
    max_generation_attempts: int = Field(default=10, ge=1)

    # Logging
    log_level: str = "INFO"
    log_stack: str = "backend"
    log_api_url: Optional[str] = Field(
        default=None,
        description="Remote log collector endpoint",
    )
    log_api_enabled: bool = False
    log_retry_attempts: int = Field(default=3, ge=1)
    log_retry_delay: float = 1.0
    log_timeout: float = 5.0
    log_max_pending: int = Field(
        default=1000, ge=1, description="Entries queued for the collector before new ones are dropped"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
