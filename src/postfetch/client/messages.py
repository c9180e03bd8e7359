"""Immutable request and response values threaded through the interceptor chain.

A :class:`Request` is built once per call and only ever replaced, never
mutated: each request-leg interceptor returns a new instance. Headers are
kept as an ordered sequence of ``(name, value)`` pairs so several stages can
add values under the same name without clobbering each other.

A :class:`Response` is produced once by the transport with its body fully
buffered, so every response-leg interceptor and the decoder may read
``content`` as often as they like.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Optional

import httpx


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: Optional[bytes] = None

    def with_header(self, name: str, value: str) -> Request:
        """Return a copy with ``name: value`` appended after the existing headers."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: dict[str, str]) -> Request:
        return replace(self, headers=(*self.headers, *headers.items()))

    def header_values(self, name: str) -> list[str]:
        """All values recorded under *name*, compared case-insensitively."""
        lowered = name.lower()
        return [v for k, v in self.headers if k.lower() == lowered]

    def to_httpx(self, client: httpx.AsyncClient) -> httpx.Request:
        """Freeze this request into the :class:`httpx.Request` that goes on the wire."""
        return client.build_request(
            self.method,
            self.url,
            headers=httpx.Headers(list(self.headers)),
            content=self.body,
        )


@dataclass(frozen=True)
class Response:
    status_code: int
    content: bytes
    request: Request
    headers: tuple[tuple[str, str], ...] = ()
    reason_phrase: str = ""
    elapsed_ms: int = 0

    @classmethod
    def from_httpx(cls, response: httpx.Response, request: Request, elapsed_ms: int) -> Response:
        """Wrap an httpx response whose body has already been read."""
        return cls(
            status_code=response.status_code,
            content=response.content,
            request=request,
            headers=tuple(response.headers.multi_items()),
            reason_phrase=response.reason_phrase,
            elapsed_ms=elapsed_ms,
        )

    def header(self, name: str) -> Optional[str]:
        """First value recorded under *name*, compared case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    @property
    def content_length(self) -> int:
        """Size of the buffered body in bytes."""
        return len(self.content)

    @property
    def content_type(self) -> Optional[str]:
        return self.header("content-type")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)
