"""Encoding policy types.

Enumerations for the request vocabulary (speed modes, resolution tiers,
codecs, hardware backends) and the dataclasses that carry a request through
the policy pipeline:

- EncodeRequest: what the caller asked for, already normalized
- SpeedProfile: one row of the speed profile table
- ProfileDraft: mutable working copy adjusted by the override policies
- EncodeProfile: frozen result handed to the command compiler

Every parser in this module is total: unknown wire values fall back to a
default instead of raising, so a request is never rejected for an
unrecognized option.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace
from enum import Enum

MEBIBYTE = 1024 * 1024

DEFAULT_OUTPUT_EXTENSION = ".mp4"
VALID_OUTPUT_EXTENSIONS = frozenset({".mp4", ".mov"})

MIN_FPS = 1
MAX_FPS = 60

BITRATE_PATTERN = re.compile(r"^\d{1,6}[kKmM]?$")


def _normalize_token(value: str | None) -> str:
    """Casefold a wire value and unify '-'/' ' separators to '_'."""
    if value is None:
        return ""
    return value.strip().casefold().replace("-", "_").replace(" ", "_")


class SpeedMode(Enum):
    """Named compression aggressiveness presets.

    Values are the short names used on the wire by upload forms and API
    clients. AUTO defers the choice to the size-based mode selector.
    """

    AUTO = "ai"
    VERY_FAST_PREVIEW = "turbo"
    MAX_COMPRESSION = "max"
    ULTRA_FAST = "ultra_fast"
    SUPER_FAST = "super_fast"
    FAST = "fast"
    BALANCED = "balanced"
    QUALITY = "quality"

    @classmethod
    def parse(cls, value: str | None) -> SpeedMode:
        """Parse a wire value into a SpeedMode.

        Empty or missing values mean automatic selection. Unknown values
        resolve to BALANCED.
        """
        token = _normalize_token(value)
        if not token:
            return cls.AUTO
        try:
            return cls(token)
        except ValueError:
            return _SPEED_MODE_ALIASES.get(token, cls.BALANCED)

    @property
    def is_fast_preview(self) -> bool:
        """True for the two modes that use long-edge scaling and speed tuning."""
        return self in (SpeedMode.VERY_FAST_PREVIEW, SpeedMode.MAX_COMPRESSION)


_SPEED_MODE_ALIASES: dict[str, SpeedMode] = {
    "auto": SpeedMode.AUTO,
    "automatic": SpeedMode.AUTO,
    "very_fast_preview": SpeedMode.VERY_FAST_PREVIEW,
    "preview": SpeedMode.VERY_FAST_PREVIEW,
    "max_compression": SpeedMode.MAX_COMPRESSION,
}


class ModeDecider(Enum):
    """Who picked the final speed mode."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"


class PresetTier(Enum):
    """Abstract encoder speed tiers, valued by their x264/x265 preset name."""

    FASTEST = "ultrafast"
    FAST = "veryfast"
    MEDIUM_FAST = "fast"


class Resolution(Enum):
    """Named output resolution tiers."""

    ORIGINAL = "original"
    P360 = "360p"
    P480 = "480p"
    P720 = "720p"
    P1080 = "1080p"
    P1440 = "1440p"
    P2160 = "2160p"

    @classmethod
    def parse(cls, value: str | None) -> Resolution:
        """Parse a tier name; unknown or empty values keep the original size."""
        try:
            return cls(_normalize_token(value))
        except ValueError:
            return cls.ORIGINAL


class VideoCodec(Enum):
    """Abstract target video codec."""

    H264 = "h264"
    H265 = "h265"
    COPY = "copy"

    @classmethod
    def parse(cls, value: str | None) -> VideoCodec:
        """Parse a codec name; unknown or empty values select h264."""
        token = _normalize_token(value)
        if token in ("hevc", "x265"):
            return cls.H265
        if token == "passthrough":
            return cls.COPY
        try:
            return cls(token)
        except ValueError:
            return cls.H264


class AudioCodec(Enum):
    """Abstract target audio codec."""

    AAC = "aac"
    OPUS = "opus"
    COPY = "copy"

    @classmethod
    def parse(cls, value: str | None) -> AudioCodec:
        """Parse a codec name; unknown or empty values select aac."""
        token = _normalize_token(value)
        if token == "passthrough":
            return cls.COPY
        try:
            return cls(token)
        except ValueError:
            return cls.AAC


_HARDWARE_ON_TOKENS = frozenset({"on", "true", "1", "yes"})


class HardwareAccel(Enum):
    """Hardware encoder backend."""

    NONE = "none"  # Software encoding (libx264/libx265)
    VIDEOTOOLBOX = "videotoolbox"  # Apple VideoToolbox
    NVENC = "nvenc"  # NVIDIA NVENC

    @classmethod
    def parse(
        cls,
        value: str | None,
        default_backend: HardwareAccel | None = None,
    ) -> HardwareAccel:
        """Parse a hardware flag or backend name.

        Args:
            value: "none"/"off", a backend name, or a generic "on" flag.
            default_backend: Backend used for a generic "on" flag.
                Defaults to VIDEOTOOLBOX.

        Returns:
            Parsed backend. Unknown values disable hardware.
        """
        token = _normalize_token(value)
        if token in _HARDWARE_ON_TOKENS:
            backend = default_backend or cls.VIDEOTOOLBOX
            return backend if backend is not cls.NONE else cls.VIDEOTOOLBOX
        try:
            return cls(token)
        except ValueError:
            return cls.NONE

    @property
    def enabled(self) -> bool:
        """True if a hardware backend is selected."""
        return self is not HardwareAccel.NONE


def parse_fps(value: str | int | None) -> int | None:
    """Parse a forced frame rate; anything outside 1..60 is ignored."""
    if value is None or value == "":
        return None
    try:
        fps = int(value)
    except (TypeError, ValueError):
        return None
    if MIN_FPS <= fps <= MAX_FPS:
        return fps
    return None


def normalize_output_extension(value: str | None) -> str:
    """Normalize an output container extension (".mp4" or ".mov")."""
    if not value:
        return DEFAULT_OUTPUT_EXTENSION
    ext = value.strip().casefold()
    if not ext.startswith("."):
        ext = f".{ext}"
    if ext in VALID_OUTPUT_EXTENSIONS:
        return ext
    return DEFAULT_OUTPUT_EXTENSION


def normalize_audio_bitrate(value: str | None) -> str | None:
    """Normalize an audio bitrate such as "128k" or "1M"; blank means unset.

    Raises:
        ValueError: If the value is not a number with an optional k/M suffix.
    """
    if value is None:
        return None
    bitrate = value.strip()
    if not bitrate:
        return None
    if not BITRATE_PATTERN.match(bitrate):
        raise ValueError(
            f"Invalid audio bitrate '{bitrate}'. "
            "Must be a number optionally followed by k or M (e.g. '128k')."
        )
    return bitrate.lower()


def size_to_megabytes(size_bytes: int) -> int:
    """Whole mebibytes, truncating."""
    return size_bytes // MEBIBYTE


@dataclass(frozen=True)
class EncodeRequest:
    """Caller-supplied encoding options after wire normalization."""

    mode: SpeedMode = SpeedMode.AUTO
    resolution: Resolution = Resolution.ORIGINAL
    video_codec: VideoCodec = VideoCodec.H264
    audio_codec: AudioCodec = AudioCodec.AAC
    hardware: HardwareAccel = HardwareAccel.NONE
    fps: int | None = None
    output_extension: str = DEFAULT_OUTPUT_EXTENSION
    audio_bitrate: str | None = None  # Explicit "ab" override, e.g. "160k"

    def __post_init__(self) -> None:
        """Validate request invariants."""
        if self.fps is not None and not MIN_FPS <= self.fps <= MAX_FPS:
            raise ValueError(f"fps must be {MIN_FPS}-{MAX_FPS}, got {self.fps}")
        if self.output_extension not in VALID_OUTPUT_EXTENSIONS:
            raise ValueError(
                f"output_extension must be one of "
                f"{sorted(VALID_OUTPUT_EXTENSIONS)}, got {self.output_extension}"
            )


@dataclass(frozen=True)
class SpeedProfile:
    """Quality/preset/audio settings for one speed mode."""

    crf: int
    preset: PresetTier
    audio_bitrate: str
    audio_channels: int | None = None  # None keeps the source layout


@dataclass(frozen=True)
class EncodeProfile:
    """Final encoding parameters for a single transcode.

    Immutable. The executor derives the software retry profile with
    without_hardware() rather than mutating this one.
    """

    mode: SpeedMode
    mode_decider: ModeDecider
    crf: int
    preset: PresetTier
    audio_bitrate: str
    audio_channels: int | None
    scale: str  # "W:H", a long-edge expression, or "" for no scaling
    video_codec: VideoCodec
    audio_codec: AudioCodec
    hardware: HardwareAccel
    fps: int | None
    output_extension: str
    resolution: Resolution

    def without_hardware(self) -> EncodeProfile:
        """Return a copy of this profile with hardware acceleration disabled."""
        return replace(self, hardware=HardwareAccel.NONE)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


@dataclass
class ProfileDraft:
    """Mutable working profile, built per request and frozen once.

    The safety and orientation policies adjust a draft in place; nothing
    outside the policy package sees it.
    """

    mode: SpeedMode
    mode_decider: ModeDecider
    crf: int
    preset: PresetTier
    audio_bitrate: str
    audio_channels: int | None
    scale: str
    video_codec: VideoCodec
    audio_codec: AudioCodec
    hardware: HardwareAccel
    fps: int | None
    output_extension: str
    resolution: Resolution

    def freeze(self) -> EncodeProfile:
        """Snapshot this draft into an immutable EncodeProfile."""
        return EncodeProfile(
            mode=self.mode,
            mode_decider=self.mode_decider,
            crf=self.crf,
            preset=self.preset,
            audio_bitrate=self.audio_bitrate,
            audio_channels=self.audio_channels,
            scale=self.scale,
            video_codec=self.video_codec,
            audio_codec=self.audio_codec,
            hardware=self.hardware,
            fps=self.fps,
            output_extension=self.output_extension,
            resolution=self.resolution,
        )
