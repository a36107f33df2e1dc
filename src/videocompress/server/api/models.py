"""Pydantic model for the /compress form fields.

Enumerated fields are normalized rather than rejected: an unrecognized
speed becomes "balanced", an unknown codec becomes h264, and so on. Only
an audio bitrate that ffmpeg could not parse is a validation error.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from videocompress.policy.types import (
    DEFAULT_OUTPUT_EXTENSION,
    AudioCodec,
    EncodeRequest,
    HardwareAccel,
    Resolution,
    SpeedMode,
    VideoCodec,
    normalize_audio_bitrate,
    normalize_output_extension,
    parse_fps,
)

_TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})


def is_true_flag(value: object) -> bool:
    """True for "1", "true", "yes" or "on", case-insensitive."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().casefold() in _TRUE_FLAGS


class CompressForm(BaseModel):
    """Form fields accepted by POST /compress (everything except the file)."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    speed: SpeedMode = SpeedMode.AUTO
    resolution: Resolution = Resolution.ORIGINAL
    codec: VideoCodec = VideoCodec.H264
    audio: AudioCodec = AudioCodec.AAC
    ab: str | None = None
    hw: str = "none"
    fps: int | None = None
    out_ext: str = Field(default=DEFAULT_OUTPUT_EXTENSION, alias="outExt")
    api: bool = False

    @field_validator("speed", mode="before")
    @classmethod
    def parse_speed(cls, v: object) -> SpeedMode:
        return v if isinstance(v, SpeedMode) else SpeedMode.parse(str(v))

    @field_validator("resolution", mode="before")
    @classmethod
    def parse_resolution(cls, v: object) -> Resolution:
        return v if isinstance(v, Resolution) else Resolution.parse(str(v))

    @field_validator("codec", mode="before")
    @classmethod
    def parse_codec(cls, v: object) -> VideoCodec:
        return v if isinstance(v, VideoCodec) else VideoCodec.parse(str(v))

    @field_validator("audio", mode="before")
    @classmethod
    def parse_audio(cls, v: object) -> AudioCodec:
        return v if isinstance(v, AudioCodec) else AudioCodec.parse(str(v))

    @field_validator("ab", mode="before")
    @classmethod
    def validate_bitrate(cls, v: object) -> str | None:
        """Accept bitrates like "128k" or "1M"; blank means unset."""
        return normalize_audio_bitrate(None if v is None else str(v))

    @field_validator("hw", mode="before")
    @classmethod
    def normalize_hw(cls, v: object) -> str:
        return str(v or "none").strip()

    @field_validator("fps", mode="before")
    @classmethod
    def parse_fps_value(cls, v: object) -> int | None:
        """Out-of-range or non-numeric values are dropped."""
        if v is None or isinstance(v, int):
            return parse_fps(v)
        return parse_fps(str(v).strip())

    @field_validator("out_ext", mode="before")
    @classmethod
    def parse_out_ext(cls, v: object) -> str:
        return normalize_output_extension(str(v) if v is not None else None)

    @field_validator("api", mode="before")
    @classmethod
    def parse_api_flag(cls, v: object) -> bool:
        return is_true_flag(v)

    def to_request(
        self, default_hardware: HardwareAccel = HardwareAccel.VIDEOTOOLBOX
    ) -> EncodeRequest:
        """Build the EncodeRequest for the policy engine.

        Args:
            default_hardware: Backend a bare "on" resolves to.
        """
        return EncodeRequest(
            mode=self.speed,
            resolution=self.resolution,
            video_codec=self.codec,
            audio_codec=self.audio,
            hardware=HardwareAccel.parse(self.hw, default_hardware),
            fps=self.fps,
            output_extension=self.out_ext,
            audio_bitrate=self.ab,
        )
