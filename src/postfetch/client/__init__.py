"""HTTP client core for postfetch.

Provides the immutable :class:`Request` / :class:`Response` values, the
interceptor chain that runs around every exchange, and :class:`PostsClient`,
the async client exposing the typed remote operations.

Example::

    from postfetch.client import PostsClient, default_chain
    from postfetch.output import debug

    async with PostsClient(config, chain=default_chain(debug)) as client:
        posts = await client.fetch_all()
"""

from postfetch.client.interceptors import (
    HeaderInjectionInterceptor,
    Interceptor,
    InterceptorChain,
    LoggingInterceptor,
    ResponseInspectionInterceptor,
    default_chain,
    default_client_headers,
)
from postfetch.client.messages import Request, Response
from postfetch.client.posts_client import PostsClient

__all__ = [
    "PostsClient",
    "Request",
    "Response",
    "Interceptor",
    "InterceptorChain",
    "LoggingInterceptor",
    "HeaderInjectionInterceptor",
    "ResponseInspectionInterceptor",
    "default_chain",
    "default_client_headers",
]
