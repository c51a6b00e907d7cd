"""Centralized settings management for the repair policy builder."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Values come from ``REPAIR_BUILDER_*`` environment variables and an
    optional ``.env`` file in the working directory.
    """

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False
    # DEBUG=true overrides LOG_LEVEL
    DEBUG: bool = False

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the repair_builder package
    BASE_DIR: Path = Path(__file__).resolve().parents[1]

    TAXONOMY_DATA_PATH: Path = BASE_DIR / "assets" / "repair_activity_taxonomy.json"
    APP_CONFIG_PATH: Path = BASE_DIR / "configs" / "app.yaml"

    # Local key-value store used for selections and wizard field values
    STORAGE_DIR: Path = Path.home() / ".repair_builder"

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_prefix="REPAIR_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
