"""
Engine configuration using Pydantic Settings.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Feature engine settings.

    Values come from the environment (``TOGGLE_`` prefix) or a ``.env`` file:

        TOGGLE_APP_NAME=checkout
        TOGGLE_ENVIRONMENT=production
        TOGGLE_HOSTNAME=web-01
        TOGGLE_LOG_FORMAT=text
    """

    model_config = SettingsConfigDict(
        env_prefix="TOGGLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Static context, merged under every caller context
    app_name: str | None = Field(default=None, description="Application name")
    environment: str = Field(default="default", description="Deployment environment")

    # applicationHostname strategy
    hostname: str | None = Field(
        default=None,
        description="Host name override (defaults to $HOSTNAME, then the OS host name)",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "text"}
        if v not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v

    def static_context(self) -> dict[str, str]:
        """Context fields every evaluation inherits."""
        fields = {"environment": self.environment}
        if self.app_name:
            fields["app_name"] = self.app_name
        return fields


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
