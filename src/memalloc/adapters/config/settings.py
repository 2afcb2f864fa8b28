"""Configuration management using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimulatorSettings(BaseSettings):
    """Simulation behaviour.

    Controls request parsing policy, invariant checking and report units.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMALLOC_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    unit: str = Field(
        default="KB",
        min_length=1,
        max_length=8,
        description="Capacity unit label used in reports",
    )

    strict_parsing: bool = Field(
        default=False,
        description="Abort on malformed request lines instead of skipping them",
    )

    check_invariants: bool = Field(
        default=False,
        description="Verify ledger invariants after every request",
    )

    @field_validator("unit")
    @classmethod
    def validate_unit(cls, v: str) -> str:
        """Validate unit is a single token (it is embedded in report lines)."""
        if any(ch.isspace() for ch in v):
            raise ValueError("unit must not contain whitespace")
        return v


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEMALLOC_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    json_output: bool = Field(
        default=False,
        description="Render log records as JSON instead of console output",
    )


class Settings(BaseSettings):
    """Root settings container.

    Aggregates all subsettings into a single object.

    Example:
        >>> settings = Settings()
        >>> settings.simulator.unit
        'KB'
        >>> settings.logging.level
        'WARNING'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    simulator: SimulatorSettings = Field(default_factory=SimulatorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton.

    Loads configuration from environment variables and .env file.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings (for testing).

    Forces reload of configuration from environment.
    """
    global _settings
    _settings = Settings()
    return _settings
