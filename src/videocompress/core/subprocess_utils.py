"""Async subprocess wrapper for external tool invocation.

Runs a command on the event loop with stdout discarded and stderr captured.
The child process is always reaped: on timeout it is killed before
ProcessTimeoutError is raised, and on task cancellation (for example a
client disconnect) it is killed before the cancellation propagates.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Characters of stderr kept for error reporting
STDERR_TAIL_CHARS = 4000


class ProcessTimeoutError(Exception):
    """Raised when a subprocess exceeds its deadline and was killed."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Process exceeded {timeout}s timeout")


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a finished subprocess."""

    returncode: int
    stderr: str
    elapsed_seconds: float


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


async def run_process(
    args: list[str | Path],
    timeout: float | None = None,
) -> ProcessResult:
    """Run an external command and wait for it to exit.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Seconds to wait before killing the process. None = no limit.

    Returns:
        ProcessResult with the exit code and the tail of stderr.

    Raises:
        ProcessTimeoutError: If the deadline passed. The process was killed.
        asyncio.CancelledError: If the awaiting task was cancelled. The
            process was killed.
    """
    str_args = [str(arg) for arg in args]
    command_name = str_args[0].rsplit("/", 1)[-1] if str_args else "unknown"

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )

    start_time = time.monotonic()
    process = await asyncio.create_subprocess_exec(  # nosec B603
        *str_args,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        _, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        await _kill(process)
        logger.warning(
            "Command timed out after %.1fs, killed: %s",
            timeout,
            command_name,
            extra={"command": command_name},
        )
        raise ProcessTimeoutError(timeout or 0.0) from None
    except asyncio.CancelledError:
        await _kill(process)
        logger.info("Command cancelled, killed: %s", command_name)
        raise

    elapsed = time.monotonic() - start_time
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")
    returncode = process.returncode if process.returncode is not None else -1

    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "returncode": returncode,
            "elapsed_seconds": round(elapsed, 3),
        },
    )
    return ProcessResult(
        returncode=returncode,
        stderr=stderr[-STDERR_TAIL_CHARS:],
        elapsed_seconds=elapsed,
    )
