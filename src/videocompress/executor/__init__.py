"""FFmpeg execution: command compilation, process invocation and errors."""

from videocompress.executor.errors import (
    InvalidRequestError,
    OutputInvalidError,
    ToolNotFoundError,
    TranscodeFailedError,
    TranscodeTimeoutError,
    UploadTooLargeError,
    VideoCompressError,
)
from videocompress.executor.tools import get_tool_path, require_tool

__all__ = [
    "InvalidRequestError",
    "OutputInvalidError",
    "ToolNotFoundError",
    "TranscodeFailedError",
    "TranscodeTimeoutError",
    "UploadTooLargeError",
    "VideoCompressError",
    "get_tool_path",
    "require_tool",
]
