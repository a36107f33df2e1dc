"""CLI module for videocompress."""

import logging
import sys
from pathlib import Path

import click

from videocompress.cli.exit_codes import ExitCode
from videocompress.config import ConfigError

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from videocompress.config.logging_factory import configure_logging_from_cli

    try:
        configure_logging_from_cli(
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    except (ConfigError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)
    _logging_configured = True


@click.group()
@click.version_option(package_name="videocompress")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """videocompress - Size-aware video compression service and tools."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    ctx.obj["log_json"] = log_json

    # serve configures logging itself, with stderr always enabled
    if ctx.invoked_subcommand != "serve":
        _configure_logging(log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from videocompress.cli.compress import compress_command
    from videocompress.cli.plan import plan_command
    from videocompress.cli.serve import serve_command

    main.add_command(compress_command)
    main.add_command(plan_command)
    main.add_command(serve_command)


_register_commands()
