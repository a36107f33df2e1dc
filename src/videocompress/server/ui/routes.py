"""Web UI routes, templating and HTTP middlewares.

Serves the upload form and the API documentation page, and installs the
middlewares every request passes through: request id binding with timing
logs, security headers on HTML, and friendly HTML 404 pages.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

import aiohttp_jinja2
import jinja2
from aiohttp import web

from videocompress.config.models import AppConfig
from videocompress.core.formatting import (
    format_duration_ms,
    format_file_size,
    format_throughput,
)
from videocompress.logging import new_request_id, request_context
from videocompress.policy.types import (
    MAX_FPS,
    MIN_FPS,
    VALID_OUTPUT_EXTENSIONS,
    AudioCodec,
    Resolution,
    SpeedMode,
    VideoCodec,
)

logger = logging.getLogger(__name__)

# HTTP security headers for HTML responses
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "object-src 'none'; "
        "frame-ancestors 'self'"
    ),
}

REQUEST_ID_HEADER = "X-Request-ID"
_CLIENT_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Paths not worth an access log line
QUIET_PATHS = frozenset({"/health"})

# Template directory path
TEMPLATES_DIR = Path(__file__).parent / "templates"


def _upload_form_context(config: AppConfig) -> dict:
    return {
        "speed_modes": [mode.value for mode in SpeedMode],
        "default_speed": SpeedMode.AUTO.value,
        "resolutions": [res.value for res in Resolution],
        "video_codecs": [codec.value for codec in VideoCodec],
        "audio_codecs": [codec.value for codec in AudioCodec],
        "output_extensions": sorted(VALID_OUTPUT_EXTENSIONS),
        "min_fps": MIN_FPS,
        "max_fps": MAX_FPS,
        "max_upload": format_file_size(config.server.max_upload_bytes),
    }


@aiohttp_jinja2.template("upload.html")
async def upload_form_handler(request: web.Request) -> dict:
    """Handle GET / and GET /compress with the upload form."""
    return _upload_form_context(request.app["config"])


@aiohttp_jinja2.template("api_docs.html")
async def api_docs_handler(request: web.Request) -> dict:
    """Handle GET /api-docs."""
    context = _upload_form_context(request.app["config"])
    context["base_url"] = f"{request.scheme}://{request.host}"
    return context


async def handle_404(request: web.Request) -> web.Response:
    """Handle 404 errors with a friendly HTML page."""
    return aiohttp_jinja2.render_template(
        "errors/404.html",
        request,
        {"path": request.path},
        status=404,
    )


@web.middleware
async def request_context_middleware(
    request: web.Request,
    handler: web.RequestHandler,
) -> web.StreamResponse:
    """Bind a request id for logging and log each request with timing."""
    client_id = request.headers.get(REQUEST_ID_HEADER, "")
    request_id = client_id if _CLIENT_REQUEST_ID.match(client_id) else None

    with request_context(request_id or new_request_id()) as rid:
        start_time = time.monotonic()
        status = 500
        try:
            response = await handler(request)
            status = response.status
            if not response.prepared:
                response.headers[REQUEST_ID_HEADER] = rid
            return response
        except web.HTTPException as exc:
            status = exc.status
            raise
        finally:
            if request.path not in QUIET_PATHS:
                logger.info(
                    "Request: method=%s path=%s status=%d duration_ms=%.1f",
                    request.method,
                    request.path,
                    status,
                    (time.monotonic() - start_time) * 1000,
                )


@web.middleware
async def security_headers_middleware(
    request: web.Request,
    handler: web.RequestHandler,
) -> web.StreamResponse:
    """Add security headers to all HTML responses."""
    response = await handler(request)

    content_type = response.headers.get("Content-Type", "")
    if "text/html" in content_type and not response.prepared:
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value

    return response


@web.middleware
async def error_middleware(
    request: web.Request,
    handler: web.RequestHandler,
) -> web.StreamResponse:
    """Render HTML for 404s that no handler answered."""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return await handle_404(request)


def setup_ui_routes(app: web.Application) -> None:
    """Setup UI routes, API routes and Jinja2 templating.

    Args:
        app: aiohttp Application to configure.
    """
    from videocompress.server.api import setup_api_routes

    env = aiohttp_jinja2.setup(
        app,
        loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=jinja2.select_autoescape(["html"]),
    )
    env.filters["file_size"] = format_file_size
    env.filters["duration_ms"] = format_duration_ms
    env.filters["throughput"] = format_throughput

    # Outermost first: request id binding must wrap everything that logs
    app.middlewares.append(request_context_middleware)
    app.middlewares.append(security_headers_middleware)
    app.middlewares.append(error_middleware)

    app.router.add_get("/", upload_form_handler)
    app.router.add_get("/compress", upload_form_handler)
    app.router.add_get("/api-docs", api_docs_handler)
    setup_api_routes(app)
