"""Formatting utilities.

Pure functions for presenting sizes, durations and rates in logs, the
result page and CLI output.
"""

_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")


def format_file_size(size_bytes: int) -> str:
    """Format a byte count in human-readable binary units.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted string (e.g., "512 B", "1.5 KB", "55.0 MB").
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    value = float(size_bytes)
    unit = _UNITS[0]
    for unit in _UNITS:
        value /= 1024
        if value < 1024:
            break
    return f"{value:.1f} {unit}"


def format_duration_ms(elapsed_ms: int) -> str:
    """Format milliseconds as seconds with two decimals (e.g., "12.34s")."""
    return f"{elapsed_ms / 1000:.2f}s"


def format_throughput(mb_per_second: float) -> str:
    """Format a MB/s rate for display."""
    return f"{mb_per_second:.2f} MB/s"
