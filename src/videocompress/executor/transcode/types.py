"""Transcode data types and result classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from videocompress.policy.types import EncodeProfile


class InvokerState(Enum):
    """States of the transcode invoker.

    IDLE -> RUNNING_HARDWARE -> SUCCEEDED
                             -> FAILED_HARDWARE -> RUNNING_SOFTWARE_RETRY
                                                   -> SUCCEEDED | FAILED
    IDLE -> RUNNING_SOFTWARE -> SUCCEEDED | FAILED
    """

    IDLE = "idle"
    RUNNING_HARDWARE = "running_hardware"
    RUNNING_SOFTWARE = "running_software"
    FAILED_HARDWARE = "failed_hardware"
    RUNNING_SOFTWARE_RETRY = "running_software_retry"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (InvokerState.SUCCEEDED, InvokerState.FAILED)


# Allowed transitions; anything else is a programming error
TRANSITIONS: dict[InvokerState, frozenset[InvokerState]] = {
    InvokerState.IDLE: frozenset(
        {InvokerState.RUNNING_HARDWARE, InvokerState.RUNNING_SOFTWARE}
    ),
    # FAILED directly only on timeout, cancellation or invalid output
    InvokerState.RUNNING_HARDWARE: frozenset(
        {InvokerState.SUCCEEDED, InvokerState.FAILED_HARDWARE, InvokerState.FAILED}
    ),
    InvokerState.RUNNING_SOFTWARE: frozenset(
        {InvokerState.SUCCEEDED, InvokerState.FAILED}
    ),
    InvokerState.FAILED_HARDWARE: frozenset({InvokerState.RUNNING_SOFTWARE_RETRY}),
    InvokerState.RUNNING_SOFTWARE_RETRY: frozenset(
        {InvokerState.SUCCEEDED, InvokerState.FAILED}
    ),
    InvokerState.SUCCEEDED: frozenset(),
    InvokerState.FAILED: frozenset(),
}


@dataclass
class TranscodeAttempt:
    """One ffmpeg run."""

    state: InvokerState
    """Running state the attempt was made in."""

    command: list[str]
    returncode: int | None = None
    stderr: str = ""
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


@dataclass
class TranscodeOutcome:
    """Result of a successful transcode."""

    output_path: Path
    output_bytes: int
    profile: EncodeProfile
    """Profile of the attempt that succeeded (hardware off after a fallback)."""

    elapsed_ms: int
    attempts: list[TranscodeAttempt] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        """True if the hardware attempt failed and the software retry ran."""
        return any(
            a.state is InvokerState.RUNNING_SOFTWARE_RETRY for a in self.attempts
        )
