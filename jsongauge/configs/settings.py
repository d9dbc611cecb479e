"""Centralized process settings for the exporter."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-level settings powered by pydantic-settings.

    Values come from ``JSONGAUGE_*`` environment variables or a ``.env`` file
    in the working directory. Command-line flags take precedence.
    """

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    CONFIG_PATH: Path = Path(__file__).resolve().parent / "exporter.yaml"

    # -------------------------------------------------------------------------
    # POLLING
    # -------------------------------------------------------------------------
    POLL_INTERVAL_SECONDS: float = Field(default=10.0, gt=0)

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    model_config = SettingsConfigDict(
        env_prefix="JSONGAUGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached process settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
