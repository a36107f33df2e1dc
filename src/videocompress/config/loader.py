"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (VIDEOCOMPRESS_*)
3. Config file (~/.videocompress/config.toml)
4. Default values

Environment variables:
- VIDEOCOMPRESS_CONFIG_PATH: Path to config file
- VIDEOCOMPRESS_BIND / VIDEOCOMPRESS_PORT: Server address (PORT is also
  honored for platform deployments)
- VIDEOCOMPRESS_SHUTDOWN_TIMEOUT: Graceful shutdown seconds
- VIDEOCOMPRESS_MAX_UPLOAD_BYTES: Upload size limit
- VIDEOCOMPRESS_FFMPEG_PATH: Path to ffmpeg executable
- VIDEOCOMPRESS_TRANSCODE_TIMEOUT: Transcode deadline in seconds
- VIDEOCOMPRESS_MAX_CONCURRENT: Concurrent transcodes (0 = unbounded)
- VIDEOCOMPRESS_HW_BACKEND: videotoolbox or nvenc
- VIDEOCOMPRESS_TEMP_DIR: Directory for uploads and outputs
- VIDEOCOMPRESS_RESULTS_MAX_ENTRIES / VIDEOCOMPRESS_RESULTS_TTL: Result store bounds
- VIDEOCOMPRESS_LOG_LEVEL / VIDEOCOMPRESS_LOG_FILE / VIDEOCOMPRESS_LOG_FORMAT
"""

from __future__ import annotations

import logging
import tempfile
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from videocompress.config.env import ENV_PREFIX, EnvReader
from videocompress.config.models import (
    AppConfig,
    LoggingConfig,
    ResultStoreConfig,
    ServerConfig,
    TranscodeConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".videocompress"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

_config_cache: dict[Path | None, AppConfig] = {}


class ConfigError(Exception):
    """Raised when a config file exists but cannot be parsed."""


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the config file path, honoring VIDEOCOMPRESS_CONFIG_PATH."""
    reader = env or EnvReader()
    return reader.get_path(f"{ENV_PREFIX}CONFIG_PATH", DEFAULT_CONFIG_FILE)


def load_config_file(path: Path | None = None, env: EnvReader | None = None) -> dict:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses the default location.
        env: Environment reader used to resolve the default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigError: If the file exists but is not valid TOML.
    """
    if path is None:
        path = get_default_config_path(env)

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    logger.debug("Loaded config from %s", path)
    return data


def _optional_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def build_config(
    file_config: Mapping[str, Any],
    env: EnvReader,
) -> AppConfig:
    """Merge file values and environment overrides into an AppConfig.

    Args:
        file_config: Parsed TOML content.
        env: Environment reader (environment wins over the file).

    Returns:
        Validated AppConfig.
    """
    p = ENV_PREFIX

    server_file = file_config.get("server", {})
    port = env.get_int(f"{p}PORT", env.get_int("PORT", server_file.get("port", 8080)))
    server = ServerConfig(
        bind=env.get_str(f"{p}BIND", server_file.get("bind", "127.0.0.1")),
        port=port,
        shutdown_timeout=env.get_float(
            f"{p}SHUTDOWN_TIMEOUT", server_file.get("shutdown_timeout", 30.0)
        ),
        max_upload_bytes=env.get_int(
            f"{p}MAX_UPLOAD_BYTES",
            server_file.get("max_upload_bytes", ServerConfig.max_upload_bytes),
        ),
    )

    transcode_file = file_config.get("transcode", {})
    transcode = TranscodeConfig(
        ffmpeg_path=env.get_path(
            f"{p}FFMPEG_PATH", _optional_path(transcode_file.get("ffmpeg_path"))
        ),
        timeout_seconds=env.get_float(
            f"{p}TRANSCODE_TIMEOUT",
            transcode_file.get("timeout_seconds", TranscodeConfig.timeout_seconds),
        ),
        max_concurrent=env.get_int(
            f"{p}MAX_CONCURRENT", transcode_file.get("max_concurrent", 2)
        ),
        hardware_backend=env.get_str(
            f"{p}HW_BACKEND", transcode_file.get("hardware_backend", "videotoolbox")
        ),
        temp_directory=env.get_path(
            f"{p}TEMP_DIR", _optional_path(transcode_file.get("temp_directory"))
        ),
        min_output_bytes=transcode_file.get("min_output_bytes", 1024),
    )

    results_file = file_config.get("results", {})
    results = ResultStoreConfig(
        max_entries=env.get_int(
            f"{p}RESULTS_MAX_ENTRIES", results_file.get("max_entries", 256)
        ),
        ttl_seconds=env.get_float(
            f"{p}RESULTS_TTL", results_file.get("ttl_seconds", 3600.0)
        ),
    )

    logging_file = file_config.get("logging", {})
    logging_config = LoggingConfig(
        level=env.get_str(f"{p}LOG_LEVEL", logging_file.get("level", "info")),
        file=env.get_path(f"{p}LOG_FILE", _optional_path(logging_file.get("file"))),
        format=env.get_str(f"{p}LOG_FORMAT", logging_file.get("format", "text")),
        include_stderr=logging_file.get("include_stderr", False),
        max_bytes=logging_file.get("max_bytes", 10_485_760),
        backup_count=logging_file.get("backup_count", 5),
    )

    return AppConfig(
        server=server,
        transcode=transcode,
        results=results,
        logging=logging_config,
    )


def get_config(
    config_path: Path | None = None,
    env: EnvReader | None = None,
    use_cache: bool = True,
) -> AppConfig:
    """Get configuration with full precedence handling.

    CLI overrides are applied by callers on top of the returned config.

    Args:
        config_path: Path to config file (overrides VIDEOCOMPRESS_CONFIG_PATH).
        env: Environment reader; defaults to os.environ. Results are only
            cached when reading the real environment.
        use_cache: Reuse a previously built config for the same path.

    Returns:
        AppConfig with merged configuration.
    """
    cacheable = use_cache and env is None
    if cacheable and config_path in _config_cache:
        return _config_cache[config_path]

    reader = env or EnvReader()
    config = build_config(load_config_file(config_path, reader), reader)

    if cacheable:
        _config_cache[config_path] = config
    return config


def clear_config_cache() -> None:
    """Drop cached configurations (used by tests)."""
    _config_cache.clear()


def get_temp_directory(config: TranscodeConfig) -> Path:
    """Return the directory for uploads and outputs, creating it if needed."""
    path = config.temp_directory or Path(tempfile.gettempdir())
    path.mkdir(parents=True, exist_ok=True)
    return path
