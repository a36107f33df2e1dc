"""Core utilities shared across videocompress modules."""

from videocompress.core.formatting import (
    format_duration_ms,
    format_file_size,
    format_throughput,
)

__all__ = [
    "format_duration_ms",
    "format_file_size",
    "format_throughput",
]
