"""CLI serve command.

This module provides the `videocompress serve` command that runs the
upload/compress web service until SIGTERM or SIGINT.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

import click
from aiohttp import web

from videocompress.cli.exit_codes import ExitCode
from videocompress.cli.options import config_option, load_config_or_exit
from videocompress.config import ConfigError
from videocompress.config.models import AppConfig

logger = logging.getLogger(__name__)


def _configure_server_logging(
    log_level: str | None,
    log_format: str | None,
    config_path: Path | None,
    log_file: Path | None = None,
) -> None:
    """Configure logging for server mode (stderr is always included).

    Args:
        log_level: CLI override for log level.
        log_format: CLI override for log format.
        config_path: Path to config file for reading logging settings.
        log_file: CLI override for the log file path.
    """
    from videocompress.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format=log_format,
        include_stderr=True,
    )


def create_runner(app: web.Application, config: AppConfig) -> web.AppRunner:
    """Build the AppRunner used by `serve`.

    Handlers are cancelled when the client disconnects, which kills any
    ffmpeg process they are waiting on. Cleanup waits at most
    shutdown_timeout seconds for in-flight requests.
    """
    return web.AppRunner(
        app,
        handler_cancellation=True,
        shutdown_timeout=config.server.shutdown_timeout,
    )


async def run_server(config: AppConfig) -> int:
    """Run the HTTP server until a shutdown signal arrives.

    Args:
        config: Configuration with CLI overrides applied.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from videocompress.server.app import create_app
    from videocompress.server.lifecycle import ServerLifecycle
    from videocompress.server.signals import (
        remove_signal_handlers,
        setup_signal_handlers,
    )

    bind = config.server.bind
    port = config.server.port
    shutdown_timeout = config.server.shutdown_timeout

    lifecycle = ServerLifecycle()
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    setup_signal_handlers(loop, lifecycle, shutdown_event)

    app = create_app(config)
    app["lifecycle"] = lifecycle

    runner = create_runner(app, config)
    await runner.setup()

    try:
        site = web.TCPSite(runner, bind, port)
        await site.start()

        logger.info(
            "videocompress started on http://%s:%d (PID %d)",
            bind,
            port,
            os.getpid(),
        )
        logger.info("Health endpoint: http://%s:%d/health", bind, port)
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()

        logger.info(
            "Shutdown initiated, waiting up to %.1fs for in-flight requests",
            shutdown_timeout,
        )

    except OSError as e:
        if "Address already in use" in str(e) or e.errno == 98:
            logger.error("Port %d is already in use", port)
            return ExitCode.GENERAL_ERROR
        if "Cannot assign requested address" in str(e) or e.errno == 99:
            logger.error("Cannot bind to address %s", bind)
            return ExitCode.GENERAL_ERROR
        logger.error("Server error: %s", e)
        return ExitCode.GENERAL_ERROR
    finally:
        remove_signal_handlers(loop)
        await runner.cleanup()
        logger.info("videocompress stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@config_option
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    default=None,
    help="Port to bind to (default: 8080).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level for server mode (default: info).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format: text or json (default: text).",
)
@click.pass_context
def serve_command(
    ctx: click.Context,
    config_path: Path | None,
    bind: str | None,
    port: int | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Run the videocompress web service.

    Serves the upload form at / and the compression API at /compress, with
    a health endpoint at /health. Handles graceful shutdown on SIGTERM or
    SIGINT (Ctrl+C).

    The server binds to localhost by default. Override with --bind to
    expose it on other interfaces.

    Configuration precedence (highest to lowest):
      1. CLI flags (--bind, --port, --log-level, etc.)
      2. Environment variables (VIDEOCOMPRESS_*, PORT)
      3. Config file (--config or ~/.videocompress/config.toml)
      4. Default values

    \b
    Examples:
        videocompress serve                     # Start with defaults
        videocompress serve --port 9000         # Custom port
        videocompress serve --bind 0.0.0.0      # Listen on all interfaces
        videocompress serve --log-format json   # JSON logging
    """
    obj = ctx.obj or {}
    config = load_config_or_exit(config_path)

    try:
        _configure_server_logging(
            log_level or obj.get("log_level"),
            log_format or ("json" if obj.get("log_json") else None),
            config_path,
            log_file=obj.get("log_file"),
        )
    except (ConfigError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    server = replace(
        config.server,
        bind=bind if bind is not None else config.server.bind,
        port=port if port is not None else config.server.port,
    )
    config = replace(config, server=server)

    if server.port < 1024:
        logger.warning("Port %d is privileged and may require root", server.port)

    logger.info(
        "Starting videocompress (bind=%s, port=%d, max_concurrent=%d)",
        server.bind,
        server.port,
        config.transcode.max_concurrent,
    )

    try:
        exit_code = asyncio.run(run_server(config))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
