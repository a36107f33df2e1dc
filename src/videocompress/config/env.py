"""Environment variable reader with dependency injection support.

EnvReader wraps a mapping (os.environ by default) and parses typed values.
Invalid values are logged and replaced by the default instead of raising,
so a typo in the environment never prevents the server from starting.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "VIDEOCOMPRESS_"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class EnvReader:
    """Typed access to environment variables.

    Example:
        reader = EnvReader(env={"VIDEOCOMPRESS_PORT": "9000"})
        reader.get_int("VIDEOCOMPRESS_PORT", 8080)  # -> 9000
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the reader.

        Args:
            env: Mapping to read instead of os.environ. Useful for testing.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def has(self, var: str) -> bool:
        """True if the variable is set to a non-empty value."""
        return bool(self._env.get(var))

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a raw string, or default if unset or empty."""
        value = self._env.get(var)
        return value if value else default

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer; logs a warning and returns default if unparseable."""
        value = self._env.get(var)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float; logs a warning and returns default if unparseable."""
        value = self._env.get(var)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean. "true", "1", "yes" and "on" are true, case-insensitive."""
        value = self._env.get(var)
        if not value:
            return default
        return value.strip().lower() in _TRUE_VALUES

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a user-expanded path (existence is not checked)."""
        value = self._env.get(var)
        if not value:
            return default
        return Path(value).expanduser()
