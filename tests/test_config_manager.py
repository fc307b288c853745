from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from stock_service.config_manager import DEMO_API_KEY, ConfigError, ConfigManager


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ALPHAVANTAGE_API_KEY", raising=False)
    for key in list(os.environ):
        if key.startswith("STOCK_API_"):
            monkeypatch.delenv(key, raising=False)


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_repository_defaults_load(tmp_path: Path) -> None:
    config = ConfigManager(user_path=tmp_path / "missing.json").load()

    assert config.alpha_vantage.api_key == DEMO_API_KEY
    assert config.alpha_vantage.base_url == "https://www.alphavantage.co/query"
    assert config.cors.allow_origins == ["*"]
    assert config.cors.allow_methods == ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    assert config.cors.allow_credentials is False
    assert config.cors.max_age == 3600
    assert config.server.port == 8080


def test_user_overrides_are_deep_merged(tmp_path: Path) -> None:
    user = _write(tmp_path / "local.json", {"alpha_vantage": {"max_retries": 3}, "server": {"port": 9000}})

    config = ConfigManager(user_path=user).load()

    assert config.alpha_vantage.max_retries == 3
    assert config.alpha_vantage.timeout_seconds == 15
    assert config.server.port == 9000
    assert config.server.host == "0.0.0.0"


def test_env_overrides_apply(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCK_API_SERVER__PORT", "8181")
    monkeypatch.setenv("STOCK_API_CORS__MAX_AGE", "60")
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "  live-key ")

    manager = ConfigManager(user_path=tmp_path / "missing.json")
    config = manager.load()

    assert config.server.port == 8181
    assert config.cors.max_age == 60
    assert config.alpha_vantage.api_key == "live-key"
    assert manager.to_dict()["alpha_vantage"]["api_key"] == "li***"


def test_empty_api_key_falls_back_to_demo(tmp_path: Path) -> None:
    user = _write(tmp_path / "local.json", {"alpha_vantage": {"api_key": ""}})

    config = ConfigManager(user_path=user).load()

    assert config.alpha_vantage.api_key == DEMO_API_KEY


def test_missing_default_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        ConfigManager(default_path=tmp_path / "nope.json").load()


def test_invalid_json_raises(tmp_path: Path) -> None:
    broken = tmp_path / "defaults.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="Unable to parse"):
        ConfigManager(default_path=broken).load()


@pytest.mark.parametrize(
    "override, message",
    [
        ({"alpha_vantage": {"timeout_seconds": 0}}, "timeout_seconds"),
        ({"alpha_vantage": {"max_retries": 0}}, "max_retries"),
        ({"cors": {"allow_credentials": True}}, "wildcard origin"),
        ({"server": {"port": 70000}}, "server.port"),
        ({"server": {"workers": 4}}, "Invalid configuration field"),
        ({"server": {"port": "eighty"}}, "Invalid configuration value"),
        ({"alpha_vantage": {"timeout_seconds": "soon"}}, "Invalid configuration value"),
    ],
)
def test_invalid_settings_are_rejected(tmp_path: Path, override: dict, message: str) -> None:
    user = _write(tmp_path / "local.json", override)

    with pytest.raises(ConfigError, match=message):
        ConfigManager(user_path=user).load()


def test_load_is_cached_until_forced(tmp_path: Path) -> None:
    user = tmp_path / "local.json"
    manager = ConfigManager(user_path=user)
    first = manager.load()

    _write(user, {"server": {"port": 9001}})

    assert manager.load() is first
    assert manager.load(force_reload=True).server.port == 9001


def test_numeric_env_values_are_coerced(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCK_API_SERVER__PORT", '"9090"')
    monkeypatch.setenv("STOCK_API_ALPHA_VANTAGE__MAX_RETRIES", "3")

    config = ConfigManager(user_path=tmp_path / "missing.json").load()

    assert config.server.port == 9090
    assert config.alpha_vantage.max_retries == 3


def test_non_numeric_env_port_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCK_API_SERVER__PORT", "eighty")

    with pytest.raises(ConfigError, match="Invalid configuration value"):
        ConfigManager(user_path=tmp_path / "missing.json").load()
