"""External tool lookup."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from videocompress.executor.errors import ToolNotFoundError

logger = logging.getLogger(__name__)


def get_tool_path(tool_name: str, configured_path: Path | None = None) -> Path | None:
    """Get the path to a tool, or None if it is not available.

    Args:
        tool_name: Executable name (e.g., "ffmpeg").
        configured_path: Explicit path from configuration. Takes precedence
            over a PATH lookup when it points to an executable file.

    Returns:
        Path to the executable or None.
    """
    if configured_path is not None:
        path = Path(configured_path).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            return path
        logger.warning("Configured %s path is not executable: %s", tool_name, path)
        return None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured_path: Path | None = None) -> Path:
    """Get the path to a required tool.

    Raises:
        ToolNotFoundError: If the tool cannot be found.
    """
    path = get_tool_path(tool_name, configured_path)
    if path is None:
        raise ToolNotFoundError(tool_name)
    return path
