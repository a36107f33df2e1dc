"""Fixtures for CLI tests."""

from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def _skip_logging_setup():
    """Leave the root logger alone so caplog keeps working."""
    with (
        patch("videocompress.cli._configure_logging"),
        patch("videocompress.cli.serve._configure_server_logging"),
    ):
        yield


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point configuration at an empty file and clear overrides."""
    for var in ("PORT", "VIDEOCOMPRESS_FFMPEG_PATH", "VIDEOCOMPRESS_PORT"):
        monkeypatch.delenv(var, raising=False)
    config_path = tmp_path / "config.toml"
    monkeypatch.setenv("VIDEOCOMPRESS_CONFIG_PATH", str(config_path))
    return config_path
