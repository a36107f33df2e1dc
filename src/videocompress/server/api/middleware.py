"""Handler decorators for API routes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps

from aiohttp import web

from videocompress.server.api.errors import SHUTTING_DOWN, api_error

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def shutdown_check_middleware(handler: Handler) -> Handler:
    """Decorator middleware that returns 503 if the server is shutting down.

    Usage:
        @shutdown_check_middleware
        async def compress_handler(request: web.Request) -> web.StreamResponse:
            ...
    """

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        lifecycle = request.app.get("lifecycle")
        if lifecycle and lifecycle.is_shutting_down:
            return api_error(
                "Service is shutting down", code=SHUTTING_DOWN, status=503
            )
        return await handler(request)

    return wrapper
