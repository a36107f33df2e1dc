"""Configuration data models.

This module defines dataclasses for videocompress configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024**3  # 2 GiB
DEFAULT_TRANSCODE_TIMEOUT = 45 * 60.0

VALID_HARDWARE_BACKENDS = frozenset({"videotoolbox", "nvenc"})


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class ServerConfig:
    """Configuration for the HTTP server (`videocompress serve`)."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 8080
    """Port number for the HTTP server."""

    shutdown_timeout: float = 30.0
    """Seconds to wait for in-flight requests on shutdown."""

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    """Uploads larger than this are rejected with 413."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )
        if self.max_upload_bytes <= 0:
            raise ValueError(
                f"max_upload_bytes must be positive, got {self.max_upload_bytes}"
            )


@dataclass
class TranscodeConfig:
    """Configuration for ffmpeg invocation."""

    ffmpeg_path: Path | None = None
    """Explicit ffmpeg executable. None = look up in PATH."""

    timeout_seconds: float = DEFAULT_TRANSCODE_TIMEOUT
    """Deadline for one request's transcode, across the fallback retry."""

    max_concurrent: int = 2
    """Concurrent ffmpeg processes. 0 = unbounded."""

    hardware_backend: str = "videotoolbox"
    """Backend used when a request just says hw=on."""

    temp_directory: Path | None = None
    """Where uploads and outputs are written. None = system temp dir."""

    min_output_bytes: int = 1024
    """Outputs smaller than this are treated as failed."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if self.max_concurrent < 0:
            raise ValueError(
                f"max_concurrent must be non-negative, got {self.max_concurrent}"
            )
        if self.hardware_backend.lower() not in VALID_HARDWARE_BACKENDS:
            raise ValueError(
                f"hardware_backend must be one of {sorted(VALID_HARDWARE_BACKENDS)}, "
                f"got {self.hardware_backend}"
            )
        if self.min_output_bytes < 0:
            raise ValueError(
                f"min_output_bytes must be non-negative, got {self.min_output_bytes}"
            )


@dataclass
class ResultStoreConfig:
    """Configuration for the in-memory result store."""

    # Maximum stored results before the oldest is evicted (0 = unbounded)
    max_entries: int = 256

    # Seconds a result stays downloadable (0 = no expiry)
    ttl_seconds: float = 3600.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_entries < 0:
            raise ValueError(
                f"max_entries must be non-negative, got {self.max_entries}"
            )
        if self.ttl_seconds < 0:
            raise ValueError(
                f"ttl_seconds must be non-negative, got {self.ttl_seconds}"
            )


@dataclass
class AppConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    transcode: TranscodeConfig = field(default_factory=TranscodeConfig)
    results: ResultStoreConfig = field(default_factory=ResultStoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
