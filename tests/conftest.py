"""Shared test fixtures for videocompress."""

import stat
from pathlib import Path

import pytest

from videocompress.config import clear_config_cache
from videocompress.policy.types import MEBIBYTE

# Copies the -i input to the last argument; fails whenever a hardware
# decode hint is present so the software fallback can be exercised.
FAKE_FFMPEG_SCRIPT = """#!/bin/sh
prev=""
input=""
output=""
for arg in "$@"; do
    if [ "$prev" = "-i" ]; then
        input="$arg"
    fi
    prev="$arg"
    output="$arg"
done
for arg in "$@"; do
    if [ "$arg" = "-hwaccel" ]; then
        echo "Error: hardware device not available" >&2
        exit 1
    fi
done
cp "$input" "$output"
"""


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """Keep cached configuration from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def fake_ffmpeg(tmp_path: Path) -> Path:
    """Executable stand-in for ffmpeg that copies input to output."""
    script = tmp_path / "bin" / "ffmpeg"
    script.parent.mkdir()
    script.write_text(FAKE_FFMPEG_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def make_video(tmp_path: Path):
    """Factory writing a placeholder input file of a given size."""

    def _make(name: str = "clip.mov", size_bytes: int = 2 * MEBIBYTE) -> Path:
        path = tmp_path / name
        with path.open("wb") as f:
            f.truncate(size_bytes)
        return path

    return _make
