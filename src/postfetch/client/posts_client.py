"""Asynchronous client for the posts API.

:class:`PostsClient` binds a :class:`~postfetch.models.TransportConfig` and an
:class:`~postfetch.client.interceptors.InterceptorChain` to the typed remote
operations :meth:`~PostsClient.fetch_by_id` and :meth:`~PostsClient.fetch_all`.
It wraps :class:`httpx.AsyncClient` and must be used as an async context
manager so the underlying transport is opened and closed properly.

Every operation performs exactly one round trip -- no caching, no retry --
and surfaces each failure category as its own exception type:

* :class:`~postfetch.exceptions.NetworkError` -- connect/read/write
  timeouts, refused connections, DNS failures.
* :class:`~postfetch.exceptions.HttpStatusError` (and
  :class:`~postfetch.exceptions.NotFoundError`) -- any non-2xx status.
* :class:`~postfetch.exceptions.DecodeError` -- malformed JSON or a payload
  that does not match :class:`~postfetch.models.Post`.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from postfetch.client.interceptors import InterceptorChain
from postfetch.client.messages import Request, Response
from postfetch.exceptions import (
    ClientStateError,
    DecodeError,
    HttpStatusError,
    NetworkError,
    NotFoundError,
)
from postfetch.models import Post, TransportConfig

_POST_LIST = TypeAdapter(list[Post])


class PostsClient:
    """Asynchronous client for the posts API.

    Args:
        config: Base endpoint and connect/read/write timeouts.
        chain: Interceptors applied around every exchange. Defaults to an
            empty chain.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests. When ``None`` httpx opens real connections.

    Example::

        async with PostsClient(TransportConfig(), chain=default_chain(debug)) as client:
            post = await client.fetch_by_id(7)
    """

    def __init__(
        self,
        config: TransportConfig,
        chain: Optional[InterceptorChain] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._chain = chain or InterceptorChain()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def chain(self) -> InterceptorChain:
        return self._chain

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> PostsClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.to_httpx_timeout(),
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Remote operations
    # ------------------------------------------------------------------ #

    async def fetch_by_id(self, post_id: int) -> Post:
        """Fetch a single post with ``GET {base}/posts/{post_id}``.

        The id is not range-checked; an unknown id surfaces as whatever the
        server answers (usually :class:`~postfetch.exceptions.NotFoundError`).
        The returned post is not cross-checked against *post_id*.
        """
        response = await self.send(Request("GET", self._url(f"posts/{post_id}")))
        return self._decode(response, Post)

    async def fetch_all(self) -> list[Post]:
        """Fetch every post with ``GET {base}/posts``, in server order."""
        response = await self.send(Request("GET", self._url("posts")))
        return self._decode(response, _POST_LIST)

    # ------------------------------------------------------------------ #
    # Exchange
    # ------------------------------------------------------------------ #

    async def send(self, request: Request) -> Response:
        """Run *request* through the chain and map error statuses to exceptions.

        Raises:
            ClientStateError: If called outside the ``async with`` block.
            NetworkError: On connection, DNS or timeout failures.
            HttpStatusError: On any response status outside 200-299.
        """
        if self._client is None:
            raise ClientStateError("Client not initialised -- use as async context manager")

        response = await self._chain.send(request, self._transmit)
        self._map_response_error(response)
        return response

    async def _transmit(self, request: Request) -> Response:
        """Perform the single network round trip and buffer the body."""
        assert self._client is not None
        wire_request = request.to_httpx(self._client)
        started = time.monotonic()
        try:
            http_response = await self._client.send(wire_request)
            await http_response.aread()
        except httpx.TransportError as exc:
            # Timeouts are a TransportError subclass; keep the original message, even if empty.
            raise NetworkError(str(exc)) from exc
        elapsed_ms = int((time.monotonic() - started) * 1000)
        return Response.from_httpx(http_response, request, elapsed_ms)

    def _url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    def _map_response_error(self, response: Response) -> None:
        """Raise a typed exception for any status outside the 2xx range."""
        status = response.status_code
        if 200 <= status < 300:
            return

        msg = ""
        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = str(detail.get("message") or detail.get("error") or detail.get("detail") or "")
            elif detail:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200].strip()

        reason = response.reason_phrase or httpx.codes.get_reason_phrase(status)
        prefix = f"HTTP {status} {reason}".rstrip()
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status == 404:
            raise NotFoundError(full_msg, status)
        raise HttpStatusError(full_msg, status)

    @staticmethod
    def _decode(response: Response, target: Any) -> Any:
        """Decode the buffered body into a :class:`Post` or ``list[Post]``."""
        try:
            if isinstance(target, TypeAdapter):
                return target.validate_json(response.content)
            return target.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(
                f"Unexpected payload from {response.request.url}: {exc.error_count()} validation error(s); "
                f"{exc.errors()[0]['msg']}"
            ) from exc
