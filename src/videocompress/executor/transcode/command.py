"""FFmpeg command building for transcoding.

This module compiles a frozen EncodeProfile into the ordered FFmpeg argument
list. Argument order is part of the output contract:

    global flags, hardware decode hint, input, video filter, frame rate,
    video encoder, rate control, pixel format, fast-preview tuning,
    audio, container flags, output
"""

from __future__ import annotations

import logging
from pathlib import Path

from videocompress.policy.types import (
    EncodeProfile,
    HardwareAccel,
    SpeedMode,
    VideoCodec,
)

from .audio import build_audio_args

logger = logging.getLogger(__name__)

GLOBAL_ARGS = ("-y", "-hide_banner", "-loglevel", "error")
CONTAINER_ARGS = ("-movflags", "+faststart", "-threads", "0")

HWACCEL_DECODE_ARGS: dict[HardwareAccel, tuple[str, ...]] = {
    HardwareAccel.VIDEOTOOLBOX: (
        "-hwaccel",
        "videotoolbox",
        "-hwaccel_output_format",
        "videotoolbox",
    ),
    HardwareAccel.NVENC: ("-hwaccel", "cuda"),
}

SOFTWARE_VIDEO_ENCODERS: dict[VideoCodec, str] = {
    VideoCodec.H264: "libx264",
    VideoCodec.H265: "libx265",
}

HARDWARE_VIDEO_ENCODERS: dict[tuple[VideoCodec, HardwareAccel], str] = {
    (VideoCodec.H264, HardwareAccel.VIDEOTOOLBOX): "h264_videotoolbox",
    (VideoCodec.H265, HardwareAccel.VIDEOTOOLBOX): "hevc_videotoolbox",
    (VideoCodec.H264, HardwareAccel.NVENC): "h264_nvenc",
    (VideoCodec.H265, HardwareAccel.NVENC): "hevc_nvenc",
}

# (max crf, bitrate) for hardware encoders, first match wins
HARDWARE_BITRATE_LADDER: tuple[tuple[int, str], ...] = (
    (20, "5M"),
    (23, "4M"),
    (26, "3M"),
    (30, "2.5M"),
    (36, "2M"),
)
HARDWARE_BITRATE_FLOOR = "1500k"
VERY_FAST_PREVIEW_HW_BITRATE = "2500k"

SCALE_FILTER_SUFFIX = ":flags=fast_bilinear,setsar=1"
FAST_PREVIEW_GOP = "300"
X264_FAST_PREVIEW_PARAMS = (
    "no-scenecut=1:ref=1:bframes=0:me=dia:subme=0:trellis=0:aq-mode=0:"
    "fast_pskip=1:sync-lookahead=0:rc-lookahead=0"
)

# Extension that gets pixel format normalization for player compatibility
PIX_FMT_EXTENSION = ".mp4"


def resolve_video_encoder(codec: VideoCodec, hardware: HardwareAccel) -> str:
    """Resolve an abstract codec and hardware backend to an FFmpeg encoder.

    Returns:
        Encoder name, or "copy" for passthrough.
    """
    if codec is VideoCodec.COPY:
        return "copy"
    if hardware.enabled:
        return HARDWARE_VIDEO_ENCODERS[(codec, hardware)]
    return SOFTWARE_VIDEO_ENCODERS[codec]


def is_hardware_encoder(encoder: str) -> bool:
    """True for VideoToolbox/NVENC encoder names."""
    return encoder.endswith(("_videotoolbox", "_nvenc"))


def hardware_bitrate_for_crf(crf: int, mode: SpeedMode) -> str:
    """Map a CRF value onto the hardware encoder bitrate ladder.

    Hardware encoders have no CRF equivalent. Very-fast-preview uses a fixed
    2500k to leave headroom for motion at 720p.
    """
    if mode is SpeedMode.VERY_FAST_PREVIEW:
        return VERY_FAST_PREVIEW_HW_BITRATE
    for max_crf, bitrate in HARDWARE_BITRATE_LADDER:
        if crf <= max_crf:
            return bitrate
    return HARDWARE_BITRATE_FLOOR


def build_scale_filter(scale: str) -> str:
    """Wrap a scale target ("W:H" or long-edge expression) into a -vf chain."""
    return f"scale={scale}{SCALE_FILTER_SUFFIX}"


def build_quality_args(profile: EncodeProfile, encoder: str) -> list[str]:
    """Build rate control arguments for the selected encoder."""
    if encoder == "copy":
        return []
    if is_hardware_encoder(encoder):
        return ["-b:v", hardware_bitrate_for_crf(profile.crf, profile.mode)]
    return ["-crf", str(profile.crf), "-preset", profile.preset.value]


def build_fast_preview_args(encoder: str) -> list[str]:
    """Speed tuning for the fast-preview modes, scoped per encoder."""
    if encoder == "libx264":
        return [
            "-tune",
            "fastdecode,zerolatency",
            "-g",
            FAST_PREVIEW_GOP,
            "-keyint_min",
            FAST_PREVIEW_GOP,
            "-x264-params",
            X264_FAST_PREVIEW_PARAMS,
        ]
    if encoder == "libx265":
        return [
            "-tune",
            "fastdecode",
            "-g",
            FAST_PREVIEW_GOP,
            "-keyint_min",
            FAST_PREVIEW_GOP,
        ]
    if encoder.endswith("_videotoolbox"):
        return ["-realtime", "true", "-g", FAST_PREVIEW_GOP]
    if encoder.endswith("_nvenc"):
        return ["-zerolatency", "1", "-g", FAST_PREVIEW_GOP]
    return []


def build_ffmpeg_command(
    profile: EncodeProfile,
    input_path: Path,
    output_path: Path,
    ffmpeg_path: Path | str = "ffmpeg",
) -> list[str]:
    """Compile an encode profile into an FFmpeg command line.

    Args:
        profile: Frozen encode profile.
        input_path: Path to the uploaded input.
        output_path: Path FFmpeg writes to; always the last argument.
        ffmpeg_path: FFmpeg executable.

    Returns:
        Complete command, executable first.
    """
    encoder = resolve_video_encoder(profile.video_codec, profile.hardware)
    reencode = encoder != "copy"

    cmd: list[str] = [str(ffmpeg_path), *GLOBAL_ARGS]

    if profile.hardware.enabled:
        cmd.extend(HWACCEL_DECODE_ARGS[profile.hardware])

    cmd.extend(["-i", str(input_path)])

    if reencode and profile.scale:
        cmd.extend(["-vf", build_scale_filter(profile.scale)])

    if reencode and profile.fps:
        cmd.extend(["-r", str(profile.fps)])

    cmd.extend(["-c:v", encoder])
    cmd.extend(build_quality_args(profile, encoder))

    if reencode and profile.output_extension == PIX_FMT_EXTENSION:
        cmd.extend(["-pix_fmt", "yuv420p"])

    if reencode and profile.mode.is_fast_preview:
        cmd.extend(build_fast_preview_args(encoder))

    cmd.extend(build_audio_args(profile))
    cmd.extend(CONTAINER_ARGS)
    cmd.append(str(output_path))

    logger.debug("Built FFmpeg command: %s", " ".join(cmd))
    return cmd
