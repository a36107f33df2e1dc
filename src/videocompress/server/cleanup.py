"""Orphaned temp file cleanup.

Uploads and compressed outputs live in the temp directory under a common
prefix. A crash or SIGKILL can leave them behind; serve removes stale ones
at startup.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = ".vc_tmp_"


def cleanup_orphaned_temp_files(
    search_dirs: list[Path],
    max_age_hours: float = 1.0,
) -> int:
    """Delete prefixed temp files older than max_age_hours.

    Only the top level of each directory is scanned; the temp directory is
    shared with other programs.

    Args:
        search_dirs: Directories to scan.
        max_age_hours: Files modified more recently are left alone.

    Returns:
        Number of files removed.
    """
    cleaned = 0
    cutoff_time = time.time() - (max_age_hours * 3600)

    for search_dir in search_dirs:
        if not search_dir.is_dir():
            continue
        for temp_file in search_dir.glob(f"{TEMP_FILE_PREFIX}*"):
            if not temp_file.is_file():
                continue
            try:
                if temp_file.stat().st_mtime < cutoff_time:
                    temp_file.unlink()
                    logger.info("Cleaned orphaned temp file: %s", temp_file)
                    cleaned += 1
            except OSError as e:
                logger.warning("Could not clean temp file %s: %s", temp_file, e)

    return cleaned


def remove_temp_file(path: Path) -> None:
    """Delete one temp file if it exists, logging failures."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temp file %s: %s", path, e)
