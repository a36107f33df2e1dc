"""Tests for upload filename handling."""

from pathlib import Path

import pytest

from videocompress.server.cleanup import TEMP_FILE_PREFIX
from videocompress.server.uploads import (
    MAX_NAME_LENGTH,
    sanitize_filename,
    temp_upload_path,
)


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("clip.mov", "clip.mov"),
            ("My Holiday Video.MP4", "My_Holiday_Video.MP4"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\clip.mov", "clip.mov"),
            ("..", "upload"),
            ("", "upload"),
            (None, "upload"),
            (".hidden.mov", "hidden.mov"),
        ],
    )
    def test_sanitize(self, name, expected):
        assert sanitize_filename(name) == expected

    def test_long_name_keeps_extension(self):
        result = sanitize_filename("a" * 300 + ".mov")
        assert len(result) == MAX_NAME_LENGTH
        assert result.endswith(".mov")


def test_temp_upload_path_is_unique_and_prefixed(tmp_path: Path):
    first = temp_upload_path(tmp_path, "clip.mov")
    second = temp_upload_path(tmp_path, "clip.mov")

    assert first != second
    assert first.parent == tmp_path
    assert first.name.startswith(TEMP_FILE_PREFIX)
    assert first.name.endswith("_clip.mov")
