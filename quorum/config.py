"""
Quorum Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
All provider keys and the shared auth token use SecretStr to prevent
accidental logging.
"""

from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quorum.registry.models import get_model_registry


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here

    Provider keys are optional: a deployment may rely entirely on keys
    supplied by the caller with each request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    environment: Literal["development", "production", "test"] = Field(
        default="production",
        description="Operating mode; 'development' enables server-held provider keys",
    )

    auth_token: SecretStr | None = Field(
        default=None,
        description="Shared secret that unlocks server-held provider keys for a caller",
    )

    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Server-held Anthropic API key"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="Server-held OpenAI API key"
    )

    google_api_key: SecretStr | None = Field(
        default=None, description="Server-held Google Gemini API key"
    )

    xai_api_key: SecretStr | None = Field(
        default=None, description="Server-held xAI (Grok) API key"
    )

    deepinfra_api_key: SecretStr | None = Field(
        default=None, description="Server-held DeepInfra API key"
    )

    default_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature used when a request does not specify one",
    )

    synthesis_model: str = Field(
        default="gemini-2.5-flash",
        description="Model requested for synthesis when the caller does not pick one",
    )

    request_timeout_sec: float = Field(
        default=120.0,
        gt=0,
        description="Timeout applied to every outbound provider request",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("synthesis_model")
    @classmethod
    def validate_synthesis_model(cls, v: str) -> str:
        """Ensure synthesis_model is a registered model ID."""
        valid_models = set(get_model_registry().get_model_ids())
        if v not in valid_models:
            raise ValueError(f"synthesis_model must be one of {sorted(valid_models)}")
        return v

    @property
    def is_development(self) -> bool:
        """True when running in development mode."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and reduces noise
    from third-party HTTP libraries. httpx logs full request URLs at INFO,
    and Gemini requests carry the API key as a query parameter.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
