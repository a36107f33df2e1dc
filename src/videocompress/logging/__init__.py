"""Structured logging for videocompress.

Configurable text or JSON output with file rotation, plus request id
propagation through contextvars.
"""

from videocompress.logging.config import configure_logging
from videocompress.logging.context import (
    RequestContextFilter,
    get_request_id,
    new_request_id,
    request_context,
)
from videocompress.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "RequestContextFilter",
    "configure_logging",
    "get_request_id",
    "new_request_id",
    "request_context",
]
