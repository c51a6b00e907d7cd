"""Configuration loader for the repair policy builder."""

from functools import lru_cache
from pathlib import Path

import yaml

from repair_builder.configs.settings import get_settings

settings = get_settings()


class Config:
    """Configuration for the repair policy builder."""

    # 1. Setup Base Paths
    CONFIG_DIR = Path(__file__).parent.resolve()
    PROJECT_ROOT = settings.BASE_DIR

    # 2. Define File Paths
    APP_CONFIG_PATH = settings.APP_CONFIG_PATH
    TAXONOMY_DATA_PATH = settings.TAXONOMY_DATA_PATH
    STORAGE_DIR = settings.STORAGE_DIR

    @classmethod
    @lru_cache
    def load_app_config(cls) -> dict:
        """Load the YAML application configuration."""
        if not cls.APP_CONFIG_PATH.exists():
            raise FileNotFoundError(f"Missing config at {cls.APP_CONFIG_PATH}")

        with open(cls.APP_CONFIG_PATH, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_taxonomy_path(cls) -> Path:
        """Return the absolute path to the taxonomy JSON."""
        return cls.TAXONOMY_DATA_PATH

    @classmethod
    def get_storage_keys(cls) -> dict:
        """Return the storage section (keys and schema version)."""
        storage = cls.load_app_config().get("storage", {})
        return {
            "selections_key": storage.get("selections_key", "catalog_selections_v1"),
            "manual_key": storage.get("manual_key", "repair_manual_data_v1"),
            "schema_version": int(storage.get("schema_version", 1)),
        }

    @classmethod
    def get_export_defaults(cls) -> dict:
        """Return the export section (filename patterns, default levels/elements)."""
        return cls.load_app_config().get("export", {})
