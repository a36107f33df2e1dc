"""Logging configuration factory.

Merges CLI logging options over the configured LoggingConfig.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from videocompress.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of base with every non-None override applied.

    Validation runs again through LoggingConfig.__post_init__, so invalid
    overrides raise ValueError.
    """
    overrides = {
        key: value
        for key, value in {
            "level": level,
            "file": file,
            "format": format,
            "include_stderr": include_stderr,
        }.items()
        if value is not None
    }
    return replace(base, **overrides)


def configure_logging_from_cli(
    *,
    config_path: Path | None = None,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Load config, apply CLI overrides and configure logging.

    Returns:
        The LoggingConfig that was applied.
    """
    from videocompress.config.loader import get_config
    from videocompress.logging import configure_logging

    config = get_config(config_path=config_path)
    final_config = build_logging_config(
        config.logging,
        level=level,
        file=file,
        format=format,
        include_stderr=include_stderr,
    )
    configure_logging(final_config)
    return final_config
