"""Transcode executor package.

Public API:
- build_ffmpeg_command: compile an EncodeProfile into an argument list
- TranscodeExecutor: run ffmpeg with the hardware-to-software fallback
- TranscodeOutcome / TranscodeAttempt / InvokerState: result types
"""

from .audio import build_audio_args
from .command import (
    build_ffmpeg_command,
    hardware_bitrate_for_crf,
    resolve_video_encoder,
)
from .executor import TranscodeExecutor, remove_partial_output, validate_output
from .types import InvokerState, TranscodeAttempt, TranscodeOutcome

__all__ = [
    "InvokerState",
    "TranscodeAttempt",
    "TranscodeExecutor",
    "TranscodeOutcome",
    "build_audio_args",
    "build_ffmpeg_command",
    "hardware_bitrate_for_crf",
    "remove_partial_output",
    "resolve_video_encoder",
    "validate_output",
]
