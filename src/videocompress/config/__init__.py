"""Configuration management for videocompress.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VIDEOCOMPRESS_*)
3. Config file (~/.videocompress/config.toml)
4. Default values (lowest priority)
"""

from videocompress.config.env import EnvReader
from videocompress.config.loader import (
    ConfigError,
    build_config,
    clear_config_cache,
    get_config,
    get_default_config_path,
    get_temp_directory,
    load_config_file,
)
from videocompress.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from videocompress.config.models import (
    AppConfig,
    LoggingConfig,
    ResultStoreConfig,
    ServerConfig,
    TranscodeConfig,
)

__all__ = [
    # Models
    "AppConfig",
    "LoggingConfig",
    "ResultStoreConfig",
    "ServerConfig",
    "TranscodeConfig",
    # Loader
    "ConfigError",
    "EnvReader",
    "build_config",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "get_temp_directory",
    "load_config_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
]
