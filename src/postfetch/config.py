"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for postfetch:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.postfetch/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~postfetch.models.GlobalConfig`
  JSON file holding the transport settings, log level and output format.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the config file into the effective
  configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from postfetch.exceptions import ConfigError
from postfetch.models import GlobalConfig, LogLevel, TransportConfig

_APP_NAME = "postfetch"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "POSTFETCH_BASE_URL"
ENV_LOG_LEVEL = "POSTFETCH_LOG_LEVEL"
_ENV_TIMEOUTS = {
    "connect_timeout": "POSTFETCH_CONNECT_TIMEOUT",
    "read_timeout": "POSTFETCH_READ_TIMEOUT",
    "write_timeout": "POSTFETCH_WRITE_TIMEOUT",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/postfetch/`` (default ``~/.config/postfetch/``).
    On macOS/Windows: ``~/.postfetch/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/postfetch/`` (default ``~/.local/share/postfetch/``).
    On macOS/Windows: ``~/.postfetch/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up and the original exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~postfetch.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or
            invalid values (negative timeouts, unknown log level, ...).
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (ConfigError, json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_timeouts() -> dict[str, float]:
    """Read timeout overrides from the environment."""
    overrides: dict[str, float] = {}
    for field_name, env_var in _ENV_TIMEOUTS.items():
        raw = os.environ.get(env_var)
        if not raw:
            continue
        try:
            overrides[field_name] = float(raw)
        except ValueError:
            raise ConfigError(f"{env_var} must be a number of seconds, got {raw!r}") from None
    return overrides


def _parse_log_level(raw: str, source: str) -> LogLevel:
    try:
        return LogLevel(raw.lower())
    except ValueError:
        choices = ", ".join(level.value for level in LogLevel)
        raise ConfigError(f"{source}: unknown log level {raw!r} (expected one of {choices})") from None


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_log_level: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_log_level``, ``cli_format``)
        2. Environment variables (``POSTFETCH_BASE_URL``,
           ``POSTFETCH_*_TIMEOUT``, ``POSTFETCH_LOG_LEVEL``)
        3. User config (``~/.config/postfetch/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~postfetch.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """
    global_cfg = load_global_config()

    transport: dict[str, Any] = global_cfg.transport.model_dump()
    transport.update(_env_timeouts())

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        transport["base_url"] = cli_base_url
    elif env_base_url:
        transport["base_url"] = env_base_url

    log_level = global_cfg.log_level
    env_log_level = os.environ.get(ENV_LOG_LEVEL)
    if cli_log_level is not None:
        log_level = _parse_log_level(cli_log_level, "--log-level")
    elif env_log_level:
        log_level = _parse_log_level(env_log_level, ENV_LOG_LEVEL)

    output = global_cfg.output.model_copy()
    if cli_format is not None:
        output.format = cli_format

    try:
        return GlobalConfig(
            transport=TransportConfig.model_validate(transport),
            log_level=log_level,
            output=output,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid transport settings: {exc}") from exc
