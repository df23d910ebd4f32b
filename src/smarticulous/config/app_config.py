"""Application configuration loader.

Loads configuration from data/config/app_config_v1.yaml, falling back to
built-in defaults. SMARTICULOUS_DB_URL overrides the database URL.

Usage:
    from smarticulous.config.app_config import get_database_url

    url = get_database_url()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

DB_URL_ENV = "SMARTICULOUS_DB_URL"
DEFAULT_DB_URL = "sqlite:///db/smarticulous.db"


@dataclass
class DatabaseConfig:
    """Configuration for the backing store."""

    url: str = DEFAULT_DB_URL


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {
            "url": DEFAULT_DB_URL,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    db_data = data.get("database") or {}
    database = DatabaseConfig(url=db_data.get("url") or DEFAULT_DB_URL)

    env_url = os.environ.get(DB_URL_ENV)
    if env_url:
        database.url = env_url

    return AppConfig(database=database)


def load_app_config(
    force_reload: bool = False,
    config_file: Path | None = None,
) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternative YAML file to read instead of CONFIG_FILE.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    path = config_file or CONFIG_FILE
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_database_url() -> str:
    """Get the effective database URL."""
    return load_app_config().database.url


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
