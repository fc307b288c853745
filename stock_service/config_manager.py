"""Configuration management utilities for the stock price service."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent / "default_settings.json"
LOCAL_SETTINGS_PATH = Path("config/settings.local.json")

# Alpha Vantage's public demo key; it only serves a handful of sample symbols.
DEMO_API_KEY = "demo"
API_KEY_ENV = "ALPHAVANTAGE_API_KEY"


class ConfigError(Exception):
    """Raised when configuration files are missing or invalid."""


@dataclass
class AlphaVantageConfig:
    api_key: str = DEMO_API_KEY
    base_url: str = "https://www.alphavantage.co/query"
    timeout_seconds: float = 15.0
    max_retries: int = 1
    backoff_seconds: float = 1.0


@dataclass
class CorsConfig:
    allow_origins: list[str] = field(default_factory=lambda: ["*"])
    allow_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])
    allow_credentials: bool = False
    max_age: int = 3600


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class StockServiceConfig:
    alpha_vantage: AlphaVantageConfig
    cors: CorsConfig
    server: ServerConfig

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigManager:
    """Loads and validates configuration data from files and environment variables."""

    def __init__(
        self,
        default_path: Path | str = DEFAULT_SETTINGS_PATH,
        user_path: Path | str = LOCAL_SETTINGS_PATH,
        env_prefix: str = "STOCK_API_",
    ) -> None:
        self.default_path = Path(default_path)
        self.user_path = Path(user_path)
        self.env_prefix = env_prefix
        self._cached_config: Optional[StockServiceConfig] = None

    def load(self, force_reload: bool = False) -> StockServiceConfig:
        """Load configuration from defaults, user overrides, and environment."""
        if self._cached_config is not None and not force_reload:
            return self._cached_config

        base_config = self._load_default_config()
        merged_config = self._merge_user_overrides(base_config)
        merged_config = self._apply_env_overrides(merged_config)

        config = self._build_config(merged_config)
        self._validate_config(config)

        self._cached_config = config
        return config

    def clear_cache(self) -> None:
        """Clear the cached configuration instance."""
        self._cached_config = None

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------
    def _load_default_config(self) -> Dict[str, Any]:
        if not self.default_path.exists():
            raise ConfigError(f"Default configuration file not found: {self.default_path}")

        with self.default_path.open("r", encoding="utf-8") as handle:
            try:
                return json.load(handle)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Unable to parse default configuration: {exc}") from exc

    def _merge_user_overrides(self, base: Dict[str, Any]) -> Dict[str, Any]:
        data = json.loads(json.dumps(base))  # deep copy via JSON to keep types JSON-compatible
        if self.user_path.exists():
            with self.user_path.open("r", encoding="utf-8") as handle:
                try:
                    overrides = json.load(handle)
                except json.JSONDecodeError as exc:
                    raise ConfigError(f"Unable to parse user configuration: {exc}") from exc
            self._deep_merge(data, overrides)
        return data

    def _apply_env_overrides(self, data: Dict[str, Any]) -> Dict[str, Any]:
        result = json.loads(json.dumps(data))
        prefix_len = len(self.env_prefix)
        for key, value in os.environ.items():
            if not key.startswith(self.env_prefix):
                continue
            path_parts = key[prefix_len:].lower().split("__")
            parsed_value = self._parse_env_value(value)
            self._set_nested_value(result, path_parts, parsed_value)

        api_key = os.environ.get(API_KEY_ENV)
        if api_key:
            self._set_nested_value(result, ["alpha_vantage", "api_key"], api_key.strip())
        return result

    # ------------------------------------------------------------------
    # Build dataclasses
    # ------------------------------------------------------------------
    def _build_config(self, data: Dict[str, Any]) -> StockServiceConfig:
        try:
            alpha_data = dict(data.get("alpha_vantage", {}))
            # An empty key falls back to the demo key rather than failing requests.
            alpha_data["api_key"] = str(alpha_data.get("api_key") or DEMO_API_KEY)
            self._coerce(alpha_data, timeout_seconds=float, max_retries=int, backoff_seconds=float)
            alpha_vantage = AlphaVantageConfig(**alpha_data)

            cors_data = dict(data.get("cors", {}))
            self._coerce(cors_data, max_age=int)
            cors = CorsConfig(**cors_data)

            server_data = dict(data.get("server", {}))
            self._coerce(server_data, host=str, port=int)
            server = ServerConfig(**server_data)
        except TypeError as exc:
            raise ConfigError(f"Invalid configuration field: {exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration value: {exc}") from exc

        return StockServiceConfig(alpha_vantage=alpha_vantage, cors=cors, server=server)

    # ------------------------------------------------------------------
    # Validation & utilities
    # ------------------------------------------------------------------
    def _validate_config(self, config: StockServiceConfig) -> None:
        alpha = config.alpha_vantage
        if alpha.timeout_seconds <= 0:
            raise ConfigError("alpha_vantage.timeout_seconds must be positive")
        if alpha.max_retries < 1:
            raise ConfigError("alpha_vantage.max_retries must be at least 1")
        if alpha.backoff_seconds < 0:
            raise ConfigError("alpha_vantage.backoff_seconds must be non-negative")

        cors = config.cors
        if cors.max_age < 0:
            raise ConfigError("cors.max_age must be non-negative")
        if cors.allow_credentials and "*" in cors.allow_origins:
            raise ConfigError("cors.allow_credentials cannot be combined with a wildcard origin")

        if not 0 < config.server.port <= 65535:
            raise ConfigError("server.port must be between 1 and 65535")

    @staticmethod
    def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        for key, value in overrides.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                ConfigManager._deep_merge(base[key], value)
            else:
                base[key] = value

    @staticmethod
    def _coerce(section: Dict[str, Any], **casts: Any) -> None:
        for name, cast in casts.items():
            if name in section and section[name] is not None:
                section[name] = cast(section[name])

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        value = value.strip()
        if not value:
            return value
        lowered = value.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    @staticmethod
    def _set_nested_value(target: Dict[str, Any], path_parts: list[str], value: Any) -> None:
        current = target
        for part in path_parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[path_parts[-1]] = value

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Return the currently cached configuration as a dictionary."""
        data = self.load().as_dict()
        if mask_secrets:
            key = data["alpha_vantage"]["api_key"]
            if key != DEMO_API_KEY:
                data["alpha_vantage"]["api_key"] = f"{key[:2]}***"
        return data


__all__ = [
    "API_KEY_ENV",
    "AlphaVantageConfig",
    "ConfigError",
    "ConfigManager",
    "CorsConfig",
    "DEMO_API_KEY",
    "ServerConfig",
    "StockServiceConfig",
]
