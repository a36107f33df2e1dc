"""Tests for external tool lookup."""

from pathlib import Path
from unittest.mock import patch

import pytest

from videocompress.executor.errors import ToolNotFoundError
from videocompress.executor.tools import get_tool_path, require_tool


class TestGetToolPath:
    def test_configured_executable(self, fake_ffmpeg: Path):
        assert get_tool_path("ffmpeg", fake_ffmpeg) == fake_ffmpeg

    def test_configured_path_not_executable(self, tmp_path: Path, caplog):
        plain = tmp_path / "ffmpeg"
        plain.write_text("not a program")
        plain.chmod(0o644)

        assert get_tool_path("ffmpeg", plain) is None
        assert "not executable" in caplog.text

    def test_path_lookup(self):
        with patch("videocompress.executor.tools.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert get_tool_path("ffmpeg") == Path("/usr/bin/ffmpeg")

    def test_not_on_path(self):
        with patch("videocompress.executor.tools.shutil.which", return_value=None):
            assert get_tool_path("ffmpeg") is None


class TestRequireTool:
    def test_missing_raises(self, tmp_path: Path):
        with pytest.raises(ToolNotFoundError) as exc_info:
            require_tool("ffmpeg", tmp_path / "missing")
        assert exc_info.value.tool_name == "ffmpeg"

    def test_found(self, fake_ffmpeg: Path):
        assert require_tool("ffmpeg", fake_ffmpeg) == fake_ffmpeg
