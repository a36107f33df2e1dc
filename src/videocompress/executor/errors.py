"""Exceptions raised while preparing or running a transcode.

Every error carries the HTTP status and machine-readable code the server
should surface, so handlers can translate any of them without a lookup
table. None of them are retried; the only automatic retry is the hardware
to software fallback inside TranscodeExecutor.
"""


class VideoCompressError(Exception):
    """Base exception for videocompress request failures.

    Attributes:
        status: Suggested HTTP status code.
        code: Machine-readable error code.
    """

    status: int = 500
    code: str = "INTERNAL_ERROR"


class InvalidRequestError(VideoCompressError):
    """Raised when a request is malformed or missing required input."""

    status = 400
    code = "INVALID_REQUEST"


class UploadTooLargeError(InvalidRequestError):
    """Raised when an upload exceeds the configured size limit.

    Attributes:
        limit_bytes: The configured upload limit.
    """

    status = 413
    code = "UPLOAD_TOO_LARGE"

    def __init__(self, limit_bytes: int) -> None:
        """Initialize the exception.

        Args:
            limit_bytes: The configured upload limit in bytes.
        """
        self.limit_bytes = limit_bytes
        super().__init__(f"Upload exceeds the {limit_bytes} byte limit")


class ToolNotFoundError(VideoCompressError):
    """Raised when the ffmpeg executable cannot be located.

    Attributes:
        tool_name: Name of the missing tool.
    """

    code = "TOOL_NOT_AVAILABLE"

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(
            f"Required tool not available: {tool_name}. "
            f"Install it or set its path in the configuration."
        )


class TranscodeFailedError(VideoCompressError):
    """Raised when ffmpeg exits non-zero after the fallback was exhausted.

    Attributes:
        returncode: Exit code of the last attempt, if it ran.
        stderr: Tail of the last attempt's diagnostic output.
        attempts: Number of ffmpeg runs made.
    """

    code = "TRANSCODE_FAILED"

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        attempts: int = 1,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description.
            returncode: Exit code of the last ffmpeg run.
            stderr: Diagnostic text captured from the last run.
            attempts: Number of ffmpeg runs made.
        """
        self.returncode = returncode
        self.stderr = stderr
        self.attempts = attempts
        super().__init__(message)


class OutputInvalidError(TranscodeFailedError):
    """Raised when ffmpeg exits zero but the output is missing or too small.

    Attributes:
        output_size: Size of the output in bytes, or None if it was missing.
    """

    code = "OUTPUT_INVALID"

    def __init__(self, output_size: int | None, min_bytes: int, attempts: int = 1):
        self.output_size = output_size
        if output_size is None:
            message = "Output file was not created"
        else:
            message = (
                f"Output seems empty or invalid ({output_size} bytes, "
                f"minimum {min_bytes})"
            )
        super().__init__(message, returncode=0, attempts=attempts)


class TranscodeTimeoutError(VideoCompressError):
    """Raised when ffmpeg exceeds the transcode deadline and is killed.

    Attributes:
        timeout: The deadline in seconds.
    """

    status = 504
    code = "TRANSCODE_TIMEOUT"

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Transcode timed out after {timeout:.0f}s")
