"""Configuration management for fluentspec."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables prefixed with FLUENTSPEC_."""

    model_config = SettingsConfigDict(
        env_prefix="FLUENTSPEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Minimum level for structured logs"
    )
    log_json: bool = Field(False, description="Render logs as JSON instead of console output")
    log_timestamps: bool = Field(True, description="Include ISO timestamps in log records")

    # Labels used for synthetic cases
    setup_error_label: str = Field(
        "### ERROR IN TEST SETUP ###",
        description="Given label used when a behavior cannot be built or expanded",
    )
    missing_examples_label: str = Field(
        "### ERROR: use of example values but none provided ###",
        description="With label used when example data is required but missing",
    )

    # Execution
    stop_on_failure: bool = Field(False, description="Stop executing cases after the first failure")


def get_settings() -> Settings:
    """Get fluentspec settings."""
    return Settings()
