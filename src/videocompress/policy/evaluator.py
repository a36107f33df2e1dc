"""Encode profile assembly.

Turns an EncodeRequest plus the input size into a frozen EncodeProfile:

    resolve mode -> speed profile -> resolution table
        -> small input safety -> orientation scale -> freeze
"""

from __future__ import annotations

import logging

from videocompress.policy.mode_selection import resolve_mode
from videocompress.policy.overrides import (
    apply_orientation_scale,
    apply_small_input_safety,
)
from videocompress.policy.profiles import get_scale_target, get_speed_profile
from videocompress.policy.types import (
    EncodeProfile,
    EncodeRequest,
    ProfileDraft,
    SpeedMode,
    size_to_megabytes,
)

logger = logging.getLogger(__name__)


def build_encode_profile(request: EncodeRequest, input_bytes: int) -> EncodeProfile:
    """Compute the encoding profile for one request.

    Args:
        request: Normalized caller options.
        input_bytes: Size of the uploaded input in bytes.

    Returns:
        Frozen EncodeProfile ready for command compilation.
    """
    size_mb = size_to_megabytes(input_bytes)
    mode, decider = resolve_mode(request.mode, size_mb)
    speed = get_speed_profile(mode)

    # An explicit bitrate only replaces the balanced default; the other
    # profiles pin their own audio bitrate.
    audio_bitrate = speed.audio_bitrate
    if request.audio_bitrate and mode is SpeedMode.BALANCED:
        audio_bitrate = request.audio_bitrate

    draft = ProfileDraft(
        mode=mode,
        mode_decider=decider,
        crf=speed.crf,
        preset=speed.preset,
        audio_bitrate=audio_bitrate,
        audio_channels=speed.audio_channels,
        scale=get_scale_target(request.resolution),
        video_codec=request.video_codec,
        audio_codec=request.audio_codec,
        hardware=request.hardware,
        fps=request.fps,
        output_extension=request.output_extension,
        resolution=request.resolution,
    )

    safety = apply_small_input_safety(draft, input_bytes)
    oriented = apply_orientation_scale(draft)

    profile = draft.freeze()
    logger.info(
        "Encode profile: mode=%s (%s) crf=%d preset=%s codec=%s audio=%s hw=%s",
        profile.mode.value,
        profile.mode_decider.value,
        profile.crf,
        profile.preset.value,
        profile.video_codec.value,
        profile.audio_codec.value,
        profile.hardware.value,
        extra={
            "size_mb": size_mb,
            "small_input_safety": safety,
            "orientation_scale": oriented,
        },
    )
    return profile
