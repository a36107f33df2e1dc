"""HTTP API handlers.

- compress.py: POST /compress (upload, transcode, respond)
- results.py: GET /dl/{id} and GET /meta/{id} for stored results
- models.py: pydantic model for the compress form fields
- middleware.py: shutdown check decorator
- errors.py: JSON error responses
"""

from aiohttp import web

from videocompress.server.api.compress import setup_compress_routes
from videocompress.server.api.results import setup_result_routes

__all__ = [
    "setup_api_routes",
]


def setup_api_routes(app: web.Application) -> None:
    """Register all API routes with the application.

    Args:
        app: aiohttp Application to configure.
    """
    setup_compress_routes(app)
    setup_result_routes(app)
