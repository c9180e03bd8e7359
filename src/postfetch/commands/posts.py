"""Post commands -- ``random``, ``get`` and ``list``.

Each command resolves the effective configuration, opens a
:class:`~postfetch.client.PostsClient` with the default interceptor chain,
runs exactly one operation through :class:`~postfetch.calls.CallWrapper`
and renders the :class:`~postfetch.calls.CallResult`. A failure is printed
to stderr and turned into the exit code of its kind.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any, Callable, Optional

import httpx
import typer

from postfetch.calls import CallResult, CallState, CallWrapper, Failure, FailureKind
from postfetch.client import PostsClient, default_chain
from postfetch.config import resolve_config
from postfetch.exceptions import ConfigError
from postfetch.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NETWORK_ERROR,
    EXIT_PROTOCOL_ERROR,
)
from postfetch.models import Post
from postfetch.output import debug, error, format_response, print_table

_EXIT_CODES = {
    FailureKind.NETWORK: EXIT_NETWORK_ERROR,
    FailureKind.PROTOCOL: EXIT_PROTOCOL_ERROR,
    FailureKind.DECODE: EXIT_DECODE_ERROR,
    FailureKind.UNEXPECTED: EXIT_GENERIC_FAILURE,
}


def _log_state(state: CallState) -> None:
    debug(f"Call state: {state.value}")


def _execute(ctx: typer.Context, action: Callable[[CallWrapper], Awaitable[CallResult[Any]]]) -> Any:
    """Run *action* against a freshly opened client and return the success value.

    ``ctx.obj["transport"]`` may carry an :class:`httpx.AsyncBaseTransport`
    to use instead of real connections.
    """
    obj = ctx.obj or {}
    try:
        config = resolve_config(
            cli_base_url=obj.get("base_url"),
            cli_log_level=obj.get("log_level"),
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None

    transport: Optional[httpx.AsyncBaseTransport] = obj.get("transport")
    chain = default_chain(debug, config.log_level)

    async def _run() -> CallResult[Any]:
        async with PostsClient(config.transport, chain=chain, transport=transport) as client:
            return await action(CallWrapper(client, on_state=_log_state))

    result = asyncio.run(_run())
    if isinstance(result, Failure):
        error(result.message)
        raise typer.Exit(code=_EXIT_CODES[result.kind])
    return result.value


def _render_post(post: Post) -> None:
    format_response(post.model_dump())


def random_command(ctx: typer.Context) -> None:
    """Fetch a post with a random id between 1 and 100.

    Example::

        postfetch random
        postfetch --verbose --log-level body random
    """
    post = _execute(ctx, lambda wrapper: wrapper.fetch_random_post())
    _render_post(post)


def get_command(
    ctx: typer.Context,
    post_id: int = typer.Argument(help="Id of the post to fetch."),
) -> None:
    """Fetch one post by id.

    Example::

        postfetch get 7
    """
    post = _execute(ctx, lambda wrapper: wrapper.fetch_post(post_id))
    _render_post(post)


def list_command(ctx: typer.Context) -> None:
    """Fetch every post, in the order the server returns them.

    Example::

        postfetch list
        postfetch --json list
    """
    posts: list[Post] = _execute(ctx, lambda wrapper: wrapper.fetch_all_posts())
    print_table(
        ["id", "title"],
        [[str(post.id), post.title] for post in posts],
        title=f"{len(posts)} posts",
    )
