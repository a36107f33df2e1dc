"""Compression service.

Glues the policy engine, the transcode executor and result records
together. The HTTP handlers and the CLI both go through CompressionService,
which also owns the concurrency limit on ffmpeg processes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from videocompress.config.models import TranscodeConfig
from videocompress.executor.tools import get_tool_path, require_tool
from videocompress.executor.transcode import (
    TranscodeExecutor,
    TranscodeOutcome,
    build_ffmpeg_command,
)
from videocompress.executor.transcode.executor import ProcessRunner
from videocompress.policy import EncodeProfile, EncodeRequest, build_encode_profile
from videocompress.policy.types import HardwareAccel
from videocompress.results import ResultRecord, compute_throughput, new_result_id

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIX = "_compressed"


def compressed_output_path(input_path: Path, output_extension: str) -> Path:
    """Derive "<dir>/<stem>_compressed<ext>" from an input path."""
    return input_path.with_name(f"{input_path.stem}{COMPRESSED_SUFFIX}{output_extension}")


def build_result_record(
    outcome: TranscodeOutcome,
    input_bytes: int,
    record_id: str | None = None,
) -> ResultRecord:
    """Create the ResultRecord for a successful transcode."""
    profile = outcome.profile
    return ResultRecord(
        id=record_id or new_result_id(),
        file_path=outcome.output_path,
        mode=profile.mode.value,
        mode_decider=profile.mode_decider.value,
        input_bytes=input_bytes,
        output_bytes=outcome.output_bytes,
        resolution=profile.resolution.value,
        video_codec=profile.video_codec.value,
        audio_codec=profile.audio_codec.value,
        hardware=profile.hardware.value,
        elapsed_ms=outcome.elapsed_ms,
        throughput_mb_s=compute_throughput(input_bytes, outcome.elapsed_ms),
    )


class CompressionService:
    """Runs compression requests against the configured ffmpeg."""

    def __init__(
        self,
        config: TranscodeConfig,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Transcode configuration.
            runner: Process runner override, passed to each TranscodeExecutor.
        """
        self.config = config
        self._runner = runner
        self._semaphore = (
            asyncio.Semaphore(config.max_concurrent)
            if config.max_concurrent > 0
            else None
        )
        self.default_hardware = HardwareAccel.parse(config.hardware_backend)

    @property
    def ffmpeg_available(self) -> bool:
        return get_tool_path("ffmpeg", self.config.ffmpeg_path) is not None

    def resolve_ffmpeg(self) -> Path:
        """Locate ffmpeg. Raises ToolNotFoundError if it is missing."""
        return require_tool("ffmpeg", self.config.ffmpeg_path)

    def plan(
        self,
        request: EncodeRequest,
        input_path: Path,
        output_path: Path,
        input_bytes: int | None = None,
    ) -> tuple[EncodeProfile, list[str]]:
        """Compute the profile and ffmpeg command without running anything.

        Uses the configured ffmpeg path, or plain "ffmpeg" when it cannot be
        found, so plans can be previewed on machines without ffmpeg.
        """
        if input_bytes is None:
            input_bytes = input_path.stat().st_size
        profile = build_encode_profile(request, input_bytes)
        ffmpeg = get_tool_path("ffmpeg", self.config.ffmpeg_path) or "ffmpeg"
        return profile, build_ffmpeg_command(profile, input_path, output_path, ffmpeg)

    @asynccontextmanager
    async def _transcode_slot(self) -> AsyncIterator[None]:
        if self._semaphore is None:
            yield
            return
        if self._semaphore.locked():
            logger.info("Waiting for a free transcode slot")
        async with self._semaphore:
            yield

    async def compress(
        self,
        request: EncodeRequest,
        input_path: Path,
        output_path: Path,
        input_bytes: int | None = None,
        record_id: str | None = None,
    ) -> ResultRecord:
        """Compress input_path into output_path.

        Args:
            request: Normalized encode request.
            input_path: Input video.
            output_path: Destination file.
            input_bytes: Input size; read from the filesystem if omitted.
            record_id: Id for the resulting record; generated if omitted.

        Returns:
            ResultRecord for the finished transcode.

        Raises:
            ToolNotFoundError: ffmpeg is not available.
            TranscodeFailedError: ffmpeg failed (after the hardware fallback).
            OutputInvalidError: ffmpeg produced no usable output.
            TranscodeTimeoutError: The transcode deadline passed.
        """
        if input_bytes is None:
            input_bytes = input_path.stat().st_size

        profile = build_encode_profile(request, input_bytes)
        executor = TranscodeExecutor(
            self.resolve_ffmpeg(),
            timeout=self.config.timeout_seconds,
            min_output_bytes=self.config.min_output_bytes,
            runner=self._runner,
        )

        async with self._transcode_slot():
            outcome = await executor.run(profile, input_path, output_path)

        record = build_result_record(outcome, input_bytes, record_id)
        logger.info(
            "Compressed %d -> %d bytes in %d ms (%.2f MB/s), mode=%s (%s)",
            record.input_bytes,
            record.output_bytes,
            record.elapsed_ms,
            record.throughput_mb_s,
            record.mode,
            record.mode_decider,
            extra={"result_id": record.id, "fallback": outcome.used_fallback},
        )
        return record
