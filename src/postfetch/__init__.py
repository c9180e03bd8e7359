"""postfetch -- a small HTTP client core for a JSON posts API.

Every remote operation issues exactly one HTTP request, threads it through
an ordered chain of interceptors (header injection, response inspection,
logging) and hands the outcome back to the caller as a uniform
:class:`~postfetch.calls.CallResult` instead of raising.

Typical usage::

    from postfetch.calls import CallWrapper
    from postfetch.client import PostsClient
    from postfetch.models import TransportConfig

    async with PostsClient(TransportConfig()) as client:
        result = await CallWrapper(client).fetch_random_post()

Modules:
    app: Typer application and CLI entry point.
    calls: Call wrapper, result envelope and id selection.
    client: Request/response types, interceptors and the posts client.
    models: Pydantic models (transport config, global config, posts).
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
