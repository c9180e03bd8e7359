"""Call wrapper: run one API operation and return a uniform result.

The presentation layer never sees exceptions from the network core. It
calls :meth:`CallWrapper.fetch_random_post` (or :meth:`CallWrapper.call`
with any client operation) and receives a :class:`Success` or a
:class:`Failure`. Each call moves through
``idle -> in_flight -> succeeded | failed`` exactly once; the optional
``on_state`` callback lets a UI render the in-flight state.

Cancelling the task that awaits a call cancels the in-flight request;
:class:`asyncio.CancelledError` is not an error outcome and is never
turned into a :class:`Failure`.
"""

from __future__ import annotations

import enum
import random
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

import httpx

from postfetch.client.posts_client import PostsClient
from postfetch.exceptions import DecodeError, HttpStatusError, NetworkError
from postfetch.models import Post
from postfetch.output import debug

T = TypeVar("T")

POST_ID_MIN = 1
POST_ID_MAX = 100

DEFAULT_ERROR_MESSAGE = "Unknown error occurred"


class FailureKind(str, enum.Enum):
    NETWORK = "network"
    PROTOCOL = "protocol"
    DECODE = "decode"
    UNEXPECTED = "unexpected"


class CallState(str, enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str
    kind: FailureKind = FailureKind.UNEXPECTED

    @property
    def ok(self) -> bool:
        return False


CallResult = Union[Success[T], Failure]


@dataclass(frozen=True)
class FallbackMessages:
    """Messages used when a failure carries no message of its own, per kind."""

    network: str = DEFAULT_ERROR_MESSAGE
    protocol: str = DEFAULT_ERROR_MESSAGE
    decode: str = DEFAULT_ERROR_MESSAGE
    unexpected: str = DEFAULT_ERROR_MESSAGE

    def for_kind(self, kind: FailureKind) -> str:
        return getattr(self, kind.value)


def classify_error(error: Exception) -> FailureKind:
    """Map an exception raised by a client operation to its failure kind."""
    if isinstance(error, (NetworkError, httpx.TransportError)):
        return FailureKind.NETWORK
    if isinstance(error, HttpStatusError):
        return FailureKind.PROTOCOL
    if isinstance(error, DecodeError):
        return FailureKind.DECODE
    return FailureKind.UNEXPECTED


def random_post_id(rng: Optional[random.Random] = None) -> int:
    """Pick a post id uniformly from ``[POST_ID_MIN, POST_ID_MAX]``."""
    source = rng if rng is not None else random
    return source.randint(POST_ID_MIN, POST_ID_MAX)


class CallWrapper:
    """Invokes one :class:`PostsClient` operation per call and wraps the outcome.

    Args:
        client: An open posts client.
        id_supplier: Produces the id for :meth:`fetch_random_post`; invoked
            once per call. Defaults to :func:`random_post_id`.
        messages: Fallback messages for failures that carry none.
        on_state: Called with each state the call enters.
    """

    def __init__(
        self,
        client: PostsClient,
        id_supplier: Callable[[], int] = random_post_id,
        messages: FallbackMessages = FallbackMessages(),
        on_state: Optional[Callable[[CallState], None]] = None,
    ) -> None:
        self._client = client
        self._id_supplier = id_supplier
        self._messages = messages
        self._on_state = on_state

    async def call(self, operation: Callable[..., Awaitable[T]], *args: Any) -> CallResult[T]:
        """Await ``operation(*args)`` once and return its :class:`CallResult`.

        Any :class:`Exception` is converted into a :class:`Failure`; nothing
        partial is attached to it.
        """
        self._enter(CallState.IN_FLIGHT)
        try:
            value = await operation(*args)
        except Exception as exc:
            kind = classify_error(exc)
            debug(f"API call failed: {type(exc).__name__} - {exc}")
            self._enter(CallState.FAILED)
            return Failure(str(exc) or self._messages.for_kind(kind), kind)
        self._enter(CallState.SUCCEEDED)
        return Success(value)

    async def fetch_random_post(self) -> CallResult[Post]:
        """Fetch a post whose id is drawn fresh from the id supplier."""
        post_id = self._id_supplier()
        debug(f"Fetching post {post_id}")
        return await self.call(self._client.fetch_by_id, post_id)

    async def fetch_post(self, post_id: int) -> CallResult[Post]:
        return await self.call(self._client.fetch_by_id, post_id)

    async def fetch_all_posts(self) -> CallResult[list[Post]]:
        return await self.call(self._client.fetch_all)

    def _enter(self, state: CallState) -> None:
        if self._on_state is not None:
            self._on_state(state)
