"""Result metadata records."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from videocompress.policy.types import MEBIBYTE

RESULT_ID_BYTES = 6  # 12 hex characters


def new_result_id() -> str:
    """Generate a random, URL-safe result identifier."""
    return secrets.token_hex(RESULT_ID_BYTES)


def compute_throughput(input_bytes: int, elapsed_ms: int) -> float:
    """Input megabytes processed per second of encoding; 0.0 for zero time."""
    if elapsed_ms <= 0:
        return 0.0
    return (input_bytes / MEBIBYTE) / (elapsed_ms / 1000)


@dataclass(frozen=True)
class ResultRecord:
    """Metadata for one finished transcode, kept for the download page."""

    id: str
    file_path: Path
    mode: str
    mode_decider: str  # "automatic" or "manual"
    input_bytes: int
    output_bytes: int
    resolution: str
    video_codec: str
    audio_codec: str
    hardware: str
    elapsed_ms: int
    throughput_mb_s: float
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def filename(self) -> str:
        return self.file_path.name

    @property
    def compression_ratio(self) -> float:
        """Output size as a percentage of input size."""
        if self.input_bytes <= 0:
            return 0.0
        return self.output_bytes / self.input_bytes * 100

    def to_metadata(self) -> dict[str, Any]:
        """JSON payload served by GET /meta/{id}."""
        return {
            "id": self.id,
            "mode": self.mode,
            "mode_decider": self.mode_decider,
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "resolution": self.resolution,
            "codec": self.video_codec,
            "audio": self.audio_codec,
            "hw": self.hardware,
            "encode_duration_ms": self.elapsed_ms,
            "throughput_mb_s": self.throughput_mb_s,
        }

    def to_headers(self) -> dict[str, str]:
        """X-* metadata headers sent with API downloads."""
        return {
            "X-Mode": self.mode,
            "X-Mode-Decider": self.mode_decider,
            "X-Encode-Duration-Ms": str(self.elapsed_ms),
            "X-Throughput-MBps": f"{self.throughput_mb_s:.4f}",
            "X-Input-Bytes": str(self.input_bytes),
            "X-Output-Bytes": str(self.output_bytes),
            "X-Resolution": self.resolution,
            "X-Video-Codec": self.video_codec,
            "X-Audio-Codec": self.audio_codec,
            "X-HW": self.hardware,
        }
