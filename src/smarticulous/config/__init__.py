"""Configuration package for the grading store."""

from smarticulous.config.app_config import (
    AppConfig,
    DatabaseConfig,
    clear_config_cache,
    get_database_url,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "clear_config_cache",
    "get_database_url",
    "load_app_config",
]
