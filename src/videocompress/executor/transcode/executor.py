"""Transcode executor for video compression via FFmpeg.

TranscodeExecutor runs one compiled profile through ffmpeg as an explicit
state machine (see InvokerState). A failed hardware run is retried exactly
once with hardware disabled; a failed software run is final. Timeouts and
cancellation are never retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

from videocompress.core.subprocess_utils import (
    ProcessResult,
    ProcessTimeoutError,
    run_process,
)
from videocompress.executor.errors import (
    OutputInvalidError,
    TranscodeFailedError,
    TranscodeTimeoutError,
)
from videocompress.policy.types import EncodeProfile

from .command import build_ffmpeg_command
from .types import TRANSITIONS, InvokerState, TranscodeAttempt, TranscodeOutcome

logger = logging.getLogger(__name__)

DEFAULT_MIN_OUTPUT_BYTES = 1024

ProcessRunner = Callable[[list[str], float | None], Awaitable[ProcessResult]]


def _last_line(text: str) -> str:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return lines[-1] if lines else ""


def remove_partial_output(path: Path) -> None:
    """Delete a partial or invalid output file if one exists."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove partial output %s: %s", path, e)


def validate_output(path: Path, min_bytes: int) -> int | None:
    """Return the output size if it is at least min_bytes, else None."""
    try:
        size = path.stat().st_size
    except OSError:
        return None
    return size if size >= min_bytes else None


class TranscodeExecutor:
    """Runs a single transcode with one hardware-to-software fallback.

    Instances are single-use: create one per request.
    """

    def __init__(
        self,
        ffmpeg_path: Path | str = "ffmpeg",
        timeout: float | None = None,
        min_output_bytes: int = DEFAULT_MIN_OUTPUT_BYTES,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Initialize the transcode executor.

        Args:
            ffmpeg_path: FFmpeg executable.
            timeout: Deadline in seconds shared by all attempts (None = no limit).
            min_output_bytes: Outputs smaller than this are rejected.
            runner: Coroutine that runs a command; defaults to run_process.
        """
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.min_output_bytes = min_output_bytes
        self._runner: ProcessRunner = runner or run_process
        self.state = InvokerState.IDLE
        self.attempts: list[TranscodeAttempt] = []

    def _transition(self, new_state: InvokerState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid transcode state transition: "
                f"{self.state.value} -> {new_state.value}"
            )
        logger.debug("Transcode state %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _remaining_timeout(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ProcessTimeoutError(self.timeout or 0.0)
        return remaining

    async def _attempt(
        self,
        profile: EncodeProfile,
        input_path: Path,
        output_path: Path,
        deadline: float | None,
    ) -> TranscodeAttempt:
        cmd = build_ffmpeg_command(profile, input_path, output_path, self.ffmpeg_path)
        attempt = TranscodeAttempt(state=self.state, command=cmd)
        self.attempts.append(attempt)

        logger.info(
            "Running ffmpeg (%s, hw=%s)",
            self.state.value,
            profile.hardware.value,
            extra={"attempt": len(self.attempts)},
        )
        result = await self._runner(cmd, self._remaining_timeout(deadline))
        attempt.returncode = result.returncode
        attempt.stderr = result.stderr
        attempt.elapsed_seconds = result.elapsed_seconds
        return attempt

    async def run(
        self,
        profile: EncodeProfile,
        input_path: Path,
        output_path: Path,
    ) -> TranscodeOutcome:
        """Transcode input_path to output_path.

        Args:
            profile: Frozen encode profile.
            input_path: Uploaded input file.
            output_path: Destination; removed again on any failure.

        Returns:
            TranscodeOutcome describing the successful attempt.

        Raises:
            TranscodeFailedError: ffmpeg failed after the fallback was exhausted.
                Also raised when ffmpeg cannot be started.
            OutputInvalidError: ffmpeg succeeded but the output is unusable.
            TranscodeTimeoutError: The deadline passed; ffmpeg was killed.
            asyncio.CancelledError: The caller went away; ffmpeg was killed.
        """
        if self.state is not InvokerState.IDLE:
            raise RuntimeError("TranscodeExecutor instances are single-use")

        start = time.monotonic()
        deadline = start + self.timeout if self.timeout else None
        current = profile

        self._transition(
            InvokerState.RUNNING_HARDWARE
            if current.hardware.enabled
            else InvokerState.RUNNING_SOFTWARE
        )

        try:
            while True:
                attempt = await self._attempt(
                    current, input_path, output_path, deadline
                )
                if attempt.succeeded:
                    break

                remove_partial_output(output_path)
                if self.state is InvokerState.RUNNING_HARDWARE:
                    self._transition(InvokerState.FAILED_HARDWARE)
                    logger.warning(
                        "Hardware encode failed (exit %d), retrying with software: %s",
                        attempt.returncode,
                        _last_line(attempt.stderr),
                        extra={"hardware": current.hardware.value},
                    )
                    current = current.without_hardware()
                    self._transition(InvokerState.RUNNING_SOFTWARE_RETRY)
                    continue

                self._transition(InvokerState.FAILED)
                detail = _last_line(attempt.stderr) or "no diagnostic output"
                logger.error(
                    "ffmpeg failed with exit code %d: %s", attempt.returncode, detail
                )
                raise TranscodeFailedError(
                    f"Compression failed (exit {attempt.returncode}): {detail}",
                    returncode=attempt.returncode,
                    stderr=attempt.stderr,
                    attempts=len(self.attempts),
                )
        except ProcessTimeoutError:
            self._abort(output_path)
            raise TranscodeTimeoutError(self.timeout or 0.0) from None
        except asyncio.CancelledError:
            self._abort(output_path)
            raise
        except OSError as e:
            self._abort(output_path)
            logger.error("Could not start ffmpeg: %s", e)
            raise TranscodeFailedError(
                f"Could not start ffmpeg: {e}", attempts=len(self.attempts)
            ) from e

        output_bytes = validate_output(output_path, self.min_output_bytes)
        if output_bytes is None:
            size = output_path.stat().st_size if output_path.exists() else None
            self._transition(InvokerState.FAILED)
            remove_partial_output(output_path)
            raise OutputInvalidError(size, self.min_output_bytes, len(self.attempts))

        self._transition(InvokerState.SUCCEEDED)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Transcode succeeded in %d ms after %d attempt(s)",
            elapsed_ms,
            len(self.attempts),
            extra={"output_bytes": output_bytes},
        )
        return TranscodeOutcome(
            output_path=output_path,
            output_bytes=output_bytes,
            profile=current,
            elapsed_ms=elapsed_ms,
            attempts=list(self.attempts),
        )

    def _abort(self, output_path: Path) -> None:
        """Move to FAILED after a timeout or cancellation and drop partial output."""
        if not self.state.is_terminal:
            self.state = InvokerState.FAILED
        remove_partial_output(output_path)
