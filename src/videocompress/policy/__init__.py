"""Encoding policy engine.

Maps a caller's request and the input size to a deterministic EncodeProfile.
"""

from videocompress.policy.evaluator import build_encode_profile
from videocompress.policy.mode_selection import (
    choose_speed_by_size,
    resolve_mode,
    select_mode,
)
from videocompress.policy.overrides import (
    apply_orientation_scale,
    apply_small_input_safety,
    long_edge_dimensions,
)
from videocompress.policy.profiles import get_scale_target, get_speed_profile
from videocompress.policy.types import (
    AudioCodec,
    EncodeProfile,
    EncodeRequest,
    HardwareAccel,
    ModeDecider,
    PresetTier,
    ProfileDraft,
    Resolution,
    SpeedMode,
    SpeedProfile,
    VideoCodec,
    size_to_megabytes,
)

__all__ = [
    "AudioCodec",
    "EncodeProfile",
    "EncodeRequest",
    "HardwareAccel",
    "ModeDecider",
    "PresetTier",
    "ProfileDraft",
    "Resolution",
    "SpeedMode",
    "SpeedProfile",
    "VideoCodec",
    "apply_orientation_scale",
    "apply_small_input_safety",
    "build_encode_profile",
    "choose_speed_by_size",
    "get_scale_target",
    "get_speed_profile",
    "long_edge_dimensions",
    "resolve_mode",
    "select_mode",
    "size_to_megabytes",
]
