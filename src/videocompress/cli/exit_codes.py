"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, input)
    30-39: Tool/dependency errors
    40-49: Operation errors
"""

from enum import IntEnum

from videocompress.executor.errors import (
    InvalidRequestError,
    OutputInvalidError,
    ToolNotFoundError,
    TranscodeTimeoutError,
    VideoCompressError,
)


class ExitCode(IntEnum):
    """Exit codes for videocompress CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Validation errors (10-19)
    CONFIG_ERROR = 11
    INVALID_ARGUMENTS = 12

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    OUTPUT_INVALID = 41
    TIMEOUT = 42


def exit_code_for(error: VideoCompressError) -> ExitCode:
    """Map a compression error to its CLI exit code."""
    if isinstance(error, ToolNotFoundError):
        return ExitCode.TOOL_NOT_AVAILABLE
    if isinstance(error, TranscodeTimeoutError):
        return ExitCode.TIMEOUT
    if isinstance(error, OutputInvalidError):
        return ExitCode.OUTPUT_INVALID
    if isinstance(error, InvalidRequestError):
        return ExitCode.INVALID_ARGUMENTS
    return ExitCode.OPERATION_FAILED
