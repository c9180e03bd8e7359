"""Tests for postfetch.config -- XDG paths, atomic writes, persistence, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from postfetch.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    resolve_config,
    save_global_config,
)
from postfetch.exceptions import ConfigError
from postfetch.models import GlobalConfig, LogLevel, OutputConfig, TransportConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _config_file(root: Path) -> Path:
    return root / "config" / "postfetch" / "config.json"


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "postfetch"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "postfetch"

    def test_data_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        result = get_data_dir()
        assert result == custom / "postfetch"
        assert result.is_dir()

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".postfetch"
        assert get_data_dir() == tmp_path / ".postfetch" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("postfetch.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfigPersistence:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(
            transport=TransportConfig(base_url="http://localhost:3000/", read_timeout=5),
            log_level=LogLevel.HEADERS,
            output=OutputConfig(format="json"),
        )
        save_global_config(original)
        assert load_global_config() == original

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        path = _config_file(isolated_config)
        path.parent.mkdir(parents=True)
        path.write_text("{invalid json!!!", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_negative_timeout_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(_config_file(isolated_config), {"transport": {"read_timeout": -1}})

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_unknown_log_level_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(_config_file(isolated_config), {"log_level": "chatty"})

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """CLI > env > config file > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_file_values_used(self, isolated_config: Path) -> None:
        _write_json(
            _config_file(isolated_config),
            {"transport": {"base_url": "http://file.example/", "connect_timeout": 3}},
        )
        cfg = resolve_config()
        assert cfg.transport.base_url == "http://file.example/"
        assert cfg.transport.connect_timeout == 3

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(_config_file(isolated_config), {"transport": {"base_url": "http://file.example/"}})
        monkeypatch.setenv("POSTFETCH_BASE_URL", "http://env.example")
        monkeypatch.setenv("POSTFETCH_READ_TIMEOUT", "7.5")
        monkeypatch.setenv("POSTFETCH_LOG_LEVEL", "BODY")

        cfg = resolve_config()
        assert cfg.transport.base_url == "http://env.example/"
        assert cfg.transport.read_timeout == 7.5
        assert cfg.log_level == LogLevel.BODY

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POSTFETCH_BASE_URL", "http://env.example/")
        monkeypatch.setenv("POSTFETCH_LOG_LEVEL", "body")

        cfg = resolve_config(cli_base_url="http://cli.example/", cli_log_level="none", cli_format="json")
        assert cfg.transport.base_url == "http://cli.example/"
        assert cfg.log_level == LogLevel.NONE
        assert cfg.output.format == "json"

    def test_env_timeout_not_a_number(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POSTFETCH_CONNECT_TIMEOUT", "soon")

        with pytest.raises(ConfigError, match="POSTFETCH_CONNECT_TIMEOUT"):
            resolve_config()

    def test_env_negative_timeout_fails_fast(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POSTFETCH_WRITE_TIMEOUT", "-2")

        with pytest.raises(ConfigError, match="write_timeout"):
            resolve_config()

    def test_unknown_cli_log_level(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="--log-level"):
            resolve_config(cli_log_level="loud")
