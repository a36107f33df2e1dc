"""HTTP application for `videocompress serve`.

This module provides the aiohttp Application with the health check
endpoint, the compress/download routes and runtime state management.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field

from aiohttp import web

from videocompress import __version__
from videocompress.config.loader import get_temp_directory
from videocompress.config.models import AppConfig
from videocompress.policy.types import SpeedMode
from videocompress.results import InMemoryResultStore, ResultStore
from videocompress.server.cleanup import cleanup_orphaned_temp_files
from videocompress.server.lifecycle import ServerLifecycle
from videocompress.server.ui import setup_ui_routes
from videocompress.service import CompressionService

logger = logging.getLogger(__name__)

SERVICE_NAME = "videocompress"

UI_ROUTES = ["/", "/compress", "/api-docs", "/dl/{id}", "/meta/{id}"]

PURGE_INTERVAL_SECONDS = 60.0

DEFAULT_OPTIONS = {"codec": "h264", "resolution": "original", "hw": "none"}


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy', 'degraded', or 'unhealthy'."""

    ffmpeg: str
    """ffmpeg availability: 'available' or 'missing'."""

    uptime_seconds: float
    """Seconds since server startup."""

    version: str
    """videocompress version string."""

    shutting_down: bool = False
    """True if graceful shutdown is in progress."""

    ok: bool = True
    service: str = SERVICE_NAME
    modes: list[str] = field(default_factory=list)
    defaults: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_OPTIONS))
    ui_routes: list[str] = field(default_factory=lambda: list(UI_ROUTES))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def create_app(
    config: AppConfig | None = None,
    store: ResultStore | None = None,
    service: CompressionService | None = None,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        config: Application configuration. Defaults are used if omitted.
        store: Result store for UI-mode results. An InMemoryResultStore
            bounded by config.results is created if omitted.
        service: Compression service. Built from config.transcode if omitted.

    Returns:
        Configured aiohttp Application instance.
    """
    config = config or AppConfig()
    if store is None:
        store = InMemoryResultStore(
            max_entries=config.results.max_entries,
            ttl_seconds=config.results.ttl_seconds,
        )

    app = web.Application()

    # Store runtime state in app dict
    app["config"] = config
    app["store"] = store
    app["service"] = service or CompressionService(config.transcode)
    app["lifecycle"] = None  # Will be set by serve command

    app.router.add_get("/health", health_handler)
    # Setup UI routes, middlewares and templates (includes API routes)
    setup_ui_routes(app)

    app.on_startup.append(_cleanup_temp_directory)
    app.on_startup.append(_start_result_sweeper)
    app.on_cleanup.append(_stop_result_sweeper)
    app.on_cleanup.append(_clear_result_store)

    return app


async def _cleanup_temp_directory(app: web.Application) -> None:
    """Remove temp files orphaned by a previous run."""
    temp_dir = get_temp_directory(app["config"].transcode)
    cleaned = await asyncio.to_thread(cleanup_orphaned_temp_files, [temp_dir])
    if cleaned:
        logger.info("Removed %d orphaned temp file(s) from %s", cleaned, temp_dir)


async def _purge_loop(store: ResultStore, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        purged = await asyncio.to_thread(store.purge_expired)
        if purged:
            logger.info("Purged %d expired result(s)", purged)


async def _start_result_sweeper(app: web.Application) -> None:
    """Start the background task that evicts expired results."""
    ttl = app["config"].results.ttl_seconds
    if not ttl:
        return
    interval = min(ttl, PURGE_INTERVAL_SECONDS)
    app["result_sweeper_handle"] = asyncio.create_task(
        _purge_loop(app["store"], interval)
    )
    logger.debug("Started result sweeper (every %.1fs)", interval)


async def _stop_result_sweeper(app: web.Application) -> None:
    """Stop the result sweeper before the store is cleared."""
    task_handle = app.get("result_sweeper_handle")
    if task_handle and not task_handle.done():
        task_handle.cancel()
        try:
            await task_handle
        except asyncio.CancelledError:
            pass
    logger.debug("Stopped result sweeper")


async def _clear_result_store(app: web.Application) -> None:
    """Evict stored results so their output files are deleted on shutdown."""
    logger.debug("Clearing result store")
    await asyncio.to_thread(app["store"].clear)


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns JSON health status with appropriate HTTP status code:
    - 200: healthy or degraded (ffmpeg missing; the UI still works)
    - 503: unhealthy (shutting down)

    Args:
        request: aiohttp Request object.

    Returns:
        JSON response with HealthStatus payload.
    """
    lifecycle: ServerLifecycle | None = request.app.get("lifecycle")
    service: CompressionService = request.app["service"]

    ffmpeg_available = await asyncio.to_thread(lambda: service.ffmpeg_available)
    shutting_down = lifecycle.is_shutting_down if lifecycle else False
    uptime = lifecycle.uptime_seconds if lifecycle else 0.0

    if shutting_down:
        status = "unhealthy"
    elif not ffmpeg_available:
        status = "degraded"
    else:
        status = "healthy"

    health = HealthStatus(
        status=status,
        ffmpeg="available" if ffmpeg_available else "missing",
        uptime_seconds=round(uptime, 1),
        version=__version__,
        shutting_down=shutting_down,
        ok=not shutting_down,
        modes=[mode.value for mode in SpeedMode],
    )

    http_status = 503 if shutting_down else 200
    return web.json_response(health.to_dict(), status=http_status)
