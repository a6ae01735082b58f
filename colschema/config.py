"""Configuration management for the collection schema engine.

Settings are read from environment variables prefixed with ``COLSCHEMA_``
(for example ``COLSCHEMA_LOG_LEVEL=DEBUG``) using Pydantic Settings. The
engine functions themselves take no configuration; settings only drive the
ambient behaviour of the CLI such as logging.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Runtime settings for the CLI and logging."""

    model_config = SettingsConfigDict(env_prefix="COLSCHEMA_", case_sensitive=False)

    # Environment
    environment: Literal["development", "testing", "production"] = Field(
        default="development", description="Application environment"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Log level")
    json_logs: bool = Field(default=False, description="Enable JSON formatted logs")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


def get_settings() -> EngineSettings:
    """Load settings from the current environment."""
    return EngineSettings()
