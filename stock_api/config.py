"""Helpers for sharing configuration with the stock API."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict

from stock_service.config_manager import ConfigManager, StockServiceConfig

# Read by worker processes (e.g. uvicorn --reload) that cannot receive a manager directly.
DEFAULTS_PATH_ENV = "STOCK_SERVICE_DEFAULTS"
SETTINGS_PATH_ENV = "STOCK_SERVICE_SETTINGS"


@lru_cache(maxsize=1)
def get_config_manager() -> ConfigManager:
    """Return a cached ConfigManager, honouring settings paths from the environment."""

    manager_kwargs: Dict[str, Path] = {}
    if os.getenv(DEFAULTS_PATH_ENV):
        manager_kwargs["default_path"] = Path(os.environ[DEFAULTS_PATH_ENV])
    if os.getenv(SETTINGS_PATH_ENV):
        manager_kwargs["user_path"] = Path(os.environ[SETTINGS_PATH_ENV])
    return ConfigManager(**manager_kwargs)


@lru_cache(maxsize=1)
def get_config() -> StockServiceConfig:
    """Load and cache the service configuration."""

    manager = get_config_manager()
    return manager.load()


__all__ = ["DEFAULTS_PATH_ENV", "SETTINGS_PATH_ENV", "get_config", "get_config_manager"]
