"""Shared test fixtures for postfetch.

Provides isolated config environments, output state management, a stub
transport factory for the posts API and a Typer CLI runner. These fixtures
are discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from postfetch.models import TransportConfig
from postfetch.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://api.example.com/"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager would
    write to closed files.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at *tmp_path*, forces the XDG layout and
    clears every POSTFETCH_* environment variable.
    """
    monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "POSTFETCH_BASE_URL",
        "POSTFETCH_CONNECT_TIMEOUT",
        "POSTFETCH_READ_TIMEOUT",
        "POSTFETCH_WRITE_TIMEOUT",
        "POSTFETCH_LOG_LEVEL",
    ]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain-format output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Transport fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def transport_config() -> TransportConfig:
    return TransportConfig(base_url=BASE_URL, connect_timeout=1, read_timeout=1, write_timeout=1)


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    """Requests seen by :func:`stub_transport`, in arrival order."""
    return []


@pytest.fixture
def stub_transport(
    recorded_requests: list[httpx.Request],
) -> Callable[..., httpx.MockTransport]:
    """Factory for a MockTransport answering every request with one canned response.

    Either pass ``json``/``content`` with a ``status_code``, or ``raises``
    with an exception instance to raise from the transport.
    """

    def _factory(
        status_code: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        raises: Exception | None = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            if raises is not None:
                raise raises
            if json is not None:
                return httpx.Response(status_code, json=json, headers=headers)
            return httpx.Response(status_code, content=content or b"", headers=headers)

        return httpx.MockTransport(handler)

    return _factory


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
