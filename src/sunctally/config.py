"""Centralized configuration using pydantic-settings.

All configurable values for a tally run.
Values can be overridden via environment variables with SUNCTALLY_ prefix.

Example:
    SUNCTALLY_RUN__TOTAL_EXPECTED=120
    SUNCTALLY_RUN__COMPLETION_WAIT_SEC=10
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunSettings(BaseSettings):
    """Run-driver policy values."""

    model_config = SettingsConfigDict(env_prefix="SUNCTALLY_RUN__")

    total_expected: int = Field(
        default=90,
        gt=0,
        description="Expected number of function results before the run reports 100%",
    )
    load_delay_sec: float = Field(
        default=1.0,
        ge=0,
        description="Pause between announcing the run and launching the harness",
    )
    completion_wait_sec: float = Field(
        default=5.0,
        ge=0,
        description="Fixed wait after the harness returns before the run is declared complete",
    )
    command_timeout_sec: int = Field(
        default=300,
        gt=0,
        description="Timeout for command harnesses",
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="SUNCTALLY_LOG__")

    level: str = Field(default="WARNING", description="Log level name")
    json_output: bool = Field(default=False, description="Render logs as JSON")


class TallySettings(BaseSettings):
    """Root configuration for sunctally.

    All settings can be overridden via environment variables with SUNCTALLY_ prefix.
    Nested settings use double underscore: SUNCTALLY_RUN__TOTAL_EXPECTED=120
    """

    model_config = SettingsConfigDict(
        env_prefix="SUNCTALLY_",
        env_nested_delimiter="__",
    )

    run: RunSettings = Field(default_factory=RunSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    registry_file: Path | None = Field(
        default=None,
        description="YAML list of function names replacing the built-in registry",
    )


# Singleton instance
settings = TallySettings()
