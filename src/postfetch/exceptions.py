"""Exception hierarchy for postfetch.

All exceptions inherit from :class:`PostfetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`postfetch.exit_codes`.
The posts client raises one distinct subclass per failure category so the
call wrapper can classify outcomes without inspecting messages.

Subclass hierarchy::

    PostfetchError (exit 1)
    +-- ConfigError         (exit 3)
    +-- ClientStateError    (exit 1)
    +-- NetworkError        (exit 6)
    +-- HttpStatusError     (exit 5)
    |   +-- NotFoundError   (exit 4)
    +-- DecodeError         (exit 7)
"""

from __future__ import annotations

from postfetch.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NETWORK_ERROR,
    EXIT_NOT_FOUND,
    EXIT_PROTOCOL_ERROR,
)


class PostfetchError(Exception):
    """Base exception for all postfetch errors.

    Args:
        message: Human-readable error description. May be empty when the
            underlying cause carried no message.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str = "", exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(PostfetchError):
    """Raised for invalid configuration (negative timeouts, bad config JSON)."""

    exit_code = EXIT_CONFIG_ERROR


class ClientStateError(PostfetchError):
    """Raised when a client is used outside of its ``async with`` block."""


class NetworkError(PostfetchError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_NETWORK_ERROR


class HttpStatusError(PostfetchError):
    """Raised when the API answers with a status code of 400 or above.

    Args:
        message: Status-derived description, e.g. ``"HTTP 500 Internal Server Error"``.
        status_code: The HTTP status code of the response.
    """

    exit_code = EXIT_PROTOCOL_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(HttpStatusError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class DecodeError(PostfetchError):
    """Raised when a response body is not valid JSON or does not match the expected schema."""

    exit_code = EXIT_DECODE_ERROR
