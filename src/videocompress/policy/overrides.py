"""Post-profile override policies.

Both policies mutate a ProfileDraft in place and run in a fixed order after
the speed profile and resolution tables have been applied:

1. apply_small_input_safety - conservative settings for inputs under 10 MB
2. apply_orientation_scale - long-edge bounding for the fast-preview modes
"""

from __future__ import annotations

import logging

from videocompress.policy.types import (
    AudioCodec,
    HardwareAccel,
    PresetTier,
    ProfileDraft,
    SpeedMode,
    VideoCodec,
    size_to_megabytes,
)

logger = logging.getLogger(__name__)

SMALL_INPUT_THRESHOLD_MB = 10
SMALL_INPUT_CRF = 22
SMALL_INPUT_PRESET = PresetTier.FAST

LONG_EDGE_TARGETS: dict[SpeedMode, int] = {
    SpeedMode.VERY_FAST_PREVIEW: 720,
    SpeedMode.MAX_COMPRESSION: 480,
}
FAST_PREVIEW_DEFAULT_FPS = 24


def apply_small_input_safety(draft: ProfileDraft, input_bytes: int) -> bool:
    """Force conservative settings for inputs smaller than 10 MB.

    Overrides codec, audio, scale, quality, preset and hardware regardless of
    what the request or the speed profile chose.

    Args:
        draft: Profile being assembled.
        input_bytes: Input file size in bytes.

    Returns:
        True if the override was applied.
    """
    if size_to_megabytes(input_bytes) >= SMALL_INPUT_THRESHOLD_MB:
        return False

    draft.video_codec = VideoCodec.H264
    draft.audio_codec = AudioCodec.AAC
    draft.scale = ""
    draft.crf = SMALL_INPUT_CRF
    draft.preset = SMALL_INPUT_PRESET
    draft.hardware = HardwareAccel.NONE

    logger.debug(
        "Small input safety applied (%d bytes)",
        input_bytes,
        extra={"input_bytes": input_bytes},
    )
    return True


def long_edge_scale_expression(long_edge: int) -> str:
    """Build an ffmpeg scale expression bounding the long edge.

    ``a`` is the input aspect ratio (iw/ih). Landscape input (a > 1) bounds
    the height, portrait or square input bounds the width; -2 lets ffmpeg
    pick the other dimension, rounded to an even number.
    """
    return f"'if(gt(a,1),-2,{long_edge})':'if(gt(a,1),{long_edge},-2)'"


def long_edge_dimensions(width: int, height: int, long_edge: int) -> tuple[int, int]:
    """Compute the output size the long-edge expression resolves to.

    Mirrors ffmpeg's evaluation for previews and tests.

    Args:
        width: Input width in pixels.
        height: Input height in pixels.
        long_edge: Bound applied to the bounded axis.

    Returns:
        Tuple of (width, height) after scaling.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"dimensions must be positive, got {width}x{height}")

    def _even(value: float) -> int:
        return max(2, int(round(value / 2)) * 2)

    if width > height:
        return _even(width * long_edge / height), long_edge
    return long_edge, _even(height * long_edge / width)


def apply_orientation_scale(draft: ProfileDraft) -> bool:
    """Replace the fixed scale with a long-edge bound for fast-preview modes.

    Only applies to very-fast-preview (720) and max-compression (480) when
    video is being re-encoded. Defaults the frame rate to 24 if none was
    requested.

    Returns:
        True if the override was applied.
    """
    long_edge = LONG_EDGE_TARGETS.get(draft.mode)
    if long_edge is None or draft.video_codec is VideoCodec.COPY:
        return False

    draft.scale = long_edge_scale_expression(long_edge)
    if draft.fps is None:
        draft.fps = FAST_PREVIEW_DEFAULT_FPS
    return True
