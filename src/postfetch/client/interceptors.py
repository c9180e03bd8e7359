"""Interceptor base class, the built-in interceptors, and the chain that runs them.

An interceptor sees each exchange at up to three points:

* :meth:`Interceptor.on_request` -- before transmission; may return a new
  :class:`~postfetch.client.messages.Request` (e.g. with extra headers).
* :meth:`Interceptor.on_response` -- after the transport returns; observes
  the buffered :class:`~postfetch.client.messages.Response` and hands it on.
* :meth:`Interceptor.on_error` -- when any stage or the transport raises;
  observation only, the error always continues to the caller unchanged.

:class:`InterceptorChain` composes the request hooks in declaration order
and the response hooks in reverse order, so the last-declared interceptor
is the innermost one: it sees the final outgoing request and the raw
incoming response. That is where :class:`LoggingInterceptor` belongs.

Example::

    chain = InterceptorChain([
        HeaderInjectionInterceptor(default_client_headers()),
        ResponseInspectionInterceptor(sink=print),
        LoggingInterceptor(sink=print, level=LogLevel.BODY),
    ])
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterable, Mapping
from typing import Callable

import httpx

from postfetch import __version__
from postfetch.client.messages import Request, Response
from postfetch.models import LogLevel

LogSink = Callable[[str], None]
SendFn = Callable[[Request], Awaitable[Response]]

REDACTED = "██"
_SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "set-cookie", "proxy-authorization"})


class Interceptor:
    """Base class for chain stages. Every hook defaults to a pass-through."""

    def on_request(self, request: Request) -> Request:
        return request

    def on_response(self, response: Response) -> Response:
        return response

    def on_error(self, request: Request, error: Exception) -> None:
        """Observe a failure. Must not try to recover from it."""


class InterceptorChain:
    """Ordered, immutable sequence of interceptors applied around one exchange.

    The chain holds no per-call state, so a single instance can be shared
    by any number of concurrent calls.

    Args:
        interceptors: Stages in declaration order. The order is fixed here
            and applies to every call made through the chain.
    """

    def __init__(self, interceptors: Iterable[Interceptor] = ()) -> None:
        self._interceptors: tuple[Interceptor, ...] = tuple(interceptors)

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    def __len__(self) -> int:
        return len(self._interceptors)

    def prepare(self, request: Request) -> Request:
        """Run the request leg: each stage's output feeds the next, in order."""
        for interceptor in self._interceptors:
            request = interceptor.on_request(request)
        return request

    def complete(self, response: Response) -> Response:
        """Run the response leg, innermost (last-declared) stage first."""
        for interceptor in reversed(self._interceptors):
            response = interceptor.on_response(response)
        return response

    def fail(self, request: Request, error: Exception) -> None:
        """Notify every stage of *error*, innermost first.

        A secondary exception raised by an observer is dropped so that it
        cannot mask *error*; the caller re-raises *error* itself.
        """
        for interceptor in reversed(self._interceptors):
            try:
                interceptor.on_error(request, error)
            except Exception:
                pass

    async def send(self, request: Request, send_fn: SendFn) -> Response:
        """Run one exchange: request leg, exactly one *send_fn* call, response leg.

        Any exception from a stage or from *send_fn* halts the exchange and
        propagates unmodified after the error observers have run.
        """
        current = request
        try:
            current = self.prepare(request)
            response = await send_fn(current)
            return self.complete(response)
        except Exception as exc:
            self.fail(current, exc)
            raise


# ------------------------------------------------------------------ #
# Built-in interceptors
# ------------------------------------------------------------------ #


def _format_headers(headers: Iterable[tuple[str, str]], redact: frozenset[str]) -> list[str]:
    return [
        f"{name}: {REDACTED if name.lower() in redact else value}"
        for name, value in headers
    ]


class LoggingInterceptor(Interceptor):
    """Writes every outgoing and incoming line through a single sink.

    ``BASIC`` logs the request line and the response status line, ``HEADERS``
    adds the headers, and ``BODY`` adds the bodies as text. Sensitive header
    values are redacted. Neither the request nor the response is altered.

    Args:
        sink: Callable receiving one log line per call.
        level: How much of each exchange to report.
        redact_headers: Header names (case-insensitive) whose values are hidden.
    """

    def __init__(
        self,
        sink: LogSink,
        level: LogLevel = LogLevel.BASIC,
        redact_headers: Iterable[str] = _SENSITIVE_HEADERS,
    ) -> None:
        self._sink = sink
        self._level = level
        self._redact = frozenset(name.lower() for name in redact_headers)

    @property
    def level(self) -> LogLevel:
        return self._level

    def on_request(self, request: Request) -> Request:
        if self._level == LogLevel.NONE:
            return request

        self._sink(f"--> {request.method} {request.url}")
        if self._level in (LogLevel.HEADERS, LogLevel.BODY):
            for line in _format_headers(request.headers, self._redact):
                self._sink(line)
            if self._level == LogLevel.BODY and request.body:
                self._sink("")
                self._sink(request.body.decode("utf-8", errors="replace"))
            self._sink(f"--> END {request.method}")
        return request

    def on_response(self, response: Response) -> Response:
        if self._level == LogLevel.NONE:
            return response

        reason = f" {response.reason_phrase}" if response.reason_phrase else ""
        summary = f"{response.elapsed_ms}ms"
        if self._level == LogLevel.BASIC:
            summary += f", {response.content_length}-byte body"
        self._sink(f"<-- {response.status_code}{reason} {response.request.url} ({summary})")
        if self._level in (LogLevel.HEADERS, LogLevel.BODY):
            for line in _format_headers(response.headers, self._redact):
                self._sink(line)
            if self._level == LogLevel.BODY:
                if response.content:
                    self._sink("")
                    self._sink(response.text)
                self._sink(f"<-- END HTTP ({response.content_length}-byte body)")
            else:
                self._sink("<-- END HTTP")
        return response

    def on_error(self, request: Request, error: Exception) -> None:
        if self._level == LogLevel.NONE:
            return
        self._sink(f"<-- HTTP FAILED: {type(error).__name__}: {error}")


class HeaderInjectionInterceptor(Interceptor):
    """Appends a fixed set of identifying headers to every outgoing request.

    Headers already present on the request are left untouched; values under
    the same name are added alongside them rather than replacing them.
    """

    def __init__(self, headers: Mapping[str, str]) -> None:
        self._headers = dict(headers)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def on_request(self, request: Request) -> Request:
        return request.with_headers(self._headers)


class ResponseInspectionInterceptor(Interceptor):
    """Reports status code, headers, body length and content type of each response.

    Reads the buffered body only, so whatever runs after it can still
    decode the payload. Failures are left to
    :meth:`~postfetch.calls.CallWrapper.call`, which sees every kind.
    """

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink

    def on_response(self, response: Response) -> Response:
        headers = "; ".join(_format_headers(response.headers, _SENSITIVE_HEADERS))
        self._sink(f"Response code: {response.status_code}")
        self._sink(f"Response headers: {headers}")
        self._sink(
            f"Response body - length: {response.content_length}, "
            f"type: {response.content_type or 'unknown'}"
        )
        return response


def default_client_headers() -> dict[str, str]:
    """The identifying client tag plus two informational version markers."""
    return {
        "User-Agent": f"postfetch/{__version__}",
        "X-Client-Version": __version__,
        "X-Httpx-Version": httpx.__version__,
    }


def default_chain(sink: LogSink, level: LogLevel = LogLevel.BASIC) -> InterceptorChain:
    """Header injection, response inspection, and logging last (innermost)."""
    return InterceptorChain([
        HeaderInjectionInterceptor(default_client_headers()),
        ResponseInspectionInterceptor(sink),
        LoggingInterceptor(sink, level),
    ])
