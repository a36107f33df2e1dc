"""Tests for policy wire-value parsing and request validation."""

import pytest

from videocompress.policy.types import (
    AudioCodec,
    EncodeRequest,
    HardwareAccel,
    Resolution,
    SpeedMode,
    VideoCodec,
    normalize_audio_bitrate,
    normalize_output_extension,
    parse_fps,
    size_to_megabytes,
)


class TestSpeedModeParse:
    """Tests for SpeedMode.parse."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_means_automatic(self, value):
        assert SpeedMode.parse(value) is SpeedMode.AUTO

    def test_wire_names(self):
        assert SpeedMode.parse("ai") is SpeedMode.AUTO
        assert SpeedMode.parse("turbo") is SpeedMode.VERY_FAST_PREVIEW
        assert SpeedMode.parse("max") is SpeedMode.MAX_COMPRESSION
        assert SpeedMode.parse("quality") is SpeedMode.QUALITY

    def test_separators_and_case_are_normalized(self):
        assert SpeedMode.parse("Ultra-Fast") is SpeedMode.ULTRA_FAST
        assert SpeedMode.parse("super fast") is SpeedMode.SUPER_FAST

    def test_unknown_falls_back_to_balanced(self):
        assert SpeedMode.parse("warp9") is SpeedMode.BALANCED

    def test_fast_preview_modes(self):
        assert SpeedMode.VERY_FAST_PREVIEW.is_fast_preview
        assert SpeedMode.MAX_COMPRESSION.is_fast_preview
        assert not SpeedMode.FAST.is_fast_preview


class TestCodecParsing:
    """Tests for codec, resolution and hardware parsing."""

    def test_video_codec_aliases(self):
        assert VideoCodec.parse("hevc") is VideoCodec.H265
        assert VideoCodec.parse("passthrough") is VideoCodec.COPY
        assert VideoCodec.parse("vp9") is VideoCodec.H264

    def test_audio_codec_unknown_is_aac(self):
        assert AudioCodec.parse("opus") is AudioCodec.OPUS
        assert AudioCodec.parse("mp3") is AudioCodec.AAC

    def test_resolution_unknown_keeps_original(self):
        assert Resolution.parse("720p") is Resolution.P720
        assert Resolution.parse("8k") is Resolution.ORIGINAL

    def test_hardware_on_uses_default_backend(self):
        assert HardwareAccel.parse("on") is HardwareAccel.VIDEOTOOLBOX
        assert (
            HardwareAccel.parse("true", HardwareAccel.NVENC) is HardwareAccel.NVENC
        )

    def test_hardware_unknown_is_disabled(self):
        assert HardwareAccel.parse("quantum") is HardwareAccel.NONE
        assert not HardwareAccel.parse("off").enabled


class TestValueHelpers:
    """Tests for fps, extension, bitrate and size helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [("30", 30), (1, 1), ("60", 60), ("0", None), ("61", None), ("abc", None)],
    )
    def test_parse_fps(self, value, expected):
        assert parse_fps(value) == expected

    def test_output_extension(self):
        assert normalize_output_extension("MOV") == ".mov"
        assert normalize_output_extension(".mkv") == ".mp4"
        assert normalize_output_extension(None) == ".mp4"

    def test_audio_bitrate(self):
        assert normalize_audio_bitrate(" 160K ") == "160k"
        assert normalize_audio_bitrate("") is None
        with pytest.raises(ValueError, match="Invalid audio bitrate"):
            normalize_audio_bitrate("loud")

    def test_size_truncates_to_whole_megabytes(self):
        assert size_to_megabytes(10 * 1024 * 1024 - 1) == 9


class TestEncodeRequest:
    """Tests for EncodeRequest validation."""

    def test_defaults(self):
        request = EncodeRequest()
        assert request.mode is SpeedMode.AUTO
        assert request.output_extension == ".mp4"
        assert request.hardware is HardwareAccel.NONE

    def test_rejects_out_of_range_fps(self):
        with pytest.raises(ValueError, match="fps"):
            EncodeRequest(fps=120)

    def test_rejects_unknown_extension(self):
        with pytest.raises(ValueError, match="output_extension"):
            EncodeRequest(output_extension=".avi")
