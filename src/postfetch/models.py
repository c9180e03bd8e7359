"""Canonical Pydantic models shared across postfetch modules.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`TransportConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Remote resources** -- decoded from API response bodies:
    :class:`Post`.

All models use Pydantic v2. Timeouts are validated eagerly so that a bad
configuration fails when it is built, never when a request is sent.
"""

from __future__ import annotations

import enum
import math

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from postfetch.exceptions import ConfigError

DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com/"
DEFAULT_TIMEOUT = 30.0


# --- Transport Config ---


class TransportConfig(BaseModel):
    """Timeouts and base endpoint consumed when building the HTTP transport.

    All three timeouts are independently configurable, expressed in
    seconds, and must be finite and non-negative. A violation raises
    :class:`~postfetch.exceptions.ConfigError` from the constructor.

    Example::

        TransportConfig(connect_timeout=5, read_timeout=10, write_timeout=10)
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Base endpoint every request path is joined to"
    )
    connect_timeout: float = Field(default=DEFAULT_TIMEOUT, description="Connect timeout in seconds")
    read_timeout: float = Field(default=DEFAULT_TIMEOUT, description="Read timeout in seconds")
    write_timeout: float = Field(default=DEFAULT_TIMEOUT, description="Write timeout in seconds")

    @field_validator("connect_timeout", "read_timeout", "write_timeout")
    @classmethod
    def _check_timeout(cls, value: float, info: ValidationInfo) -> float:
        if not math.isfinite(value) or value < 0:
            raise ConfigError(f"{info.field_name} must be a finite duration >= 0, got {value}")
        return value

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got {value!r}")
        # Relative request paths are joined onto the base, which needs a trailing slash.
        return value if value.endswith("/") else value + "/"

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Build the :class:`httpx.Timeout` used by the posts client.

        The pool-acquire timeout reuses the connect timeout.
        """
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.connect_timeout,
        )


class LogLevel(str, enum.Enum):
    """How much of each exchange the logging interceptor reports."""

    NONE = "none"
    BASIC = "basic"
    HEADERS = "headers"
    BODY = "body"


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/postfetch/config.json``.

    Loaded and saved by :func:`~postfetch.config.load_global_config` and
    :func:`~postfetch.config.save_global_config`. See
    :func:`~postfetch.config.resolve_config` for how environment variables
    and CLI flags are layered on top.
    """

    transport: TransportConfig = Field(default_factory=TransportConfig)
    log_level: LogLevel = Field(default=LogLevel.BASIC, description="Network log verbosity")
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Remote resources ---


class Post(BaseModel):
    """A post as served by the remote API.

    Immutable once decoded. Fields the API sends beyond ``id``, ``title``
    and ``body`` (``userId`` for instance) are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    title: str
    body: str
