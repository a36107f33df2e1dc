"""Tests for formatting helpers."""

from videocompress.core.formatting import (
    format_duration_ms,
    format_file_size,
    format_throughput,
)


class TestFormatFileSize:
    """Tests for format_file_size."""

    def test_bytes(self):
        assert format_file_size(0) == "0 B"
        assert format_file_size(512) == "512 B"

    def test_kilobytes(self):
        assert format_file_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_file_size(55 * 1024 * 1024) == "55.0 MB"

    def test_gigabytes(self):
        assert format_file_size(3 * 1024**3) == "3.0 GB"


def test_format_duration_ms():
    assert format_duration_ms(12340) == "12.34s"
    assert format_duration_ms(0) == "0.00s"


def test_format_throughput():
    assert format_throughput(12.345) == "12.35 MB/s"
