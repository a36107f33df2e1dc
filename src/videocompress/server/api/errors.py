"""Standardized API error responses.

All JSON error responses share one shape:
- ``error``: Human-readable error message
- ``code``: Machine-readable error code string
- ``details`` (optional): Additional context for the error

Usage:
    from videocompress.server.api.errors import api_error, NOT_FOUND

    return api_error("Unknown result id", code=NOT_FOUND, status=404)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from videocompress.executor.errors import VideoCompressError

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
VALIDATION_FAILED = "VALIDATION_FAILED"
NOT_FOUND = "NOT_FOUND"
SHUTTING_DOWN = "SHUTTING_DOWN"
INTERNAL_ERROR = "INTERNAL_ERROR"


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code.
        status: HTTP status code (default 400).
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def api_error_from_exception(error: VideoCompressError) -> web.Response:
    """JSON error response for a VideoCompressError, using its status and code."""
    details = None
    stderr = getattr(error, "stderr", "")
    if stderr:
        details = {"stderr": stderr}
    return api_error(str(error), code=error.code, status=error.status, details=details)
