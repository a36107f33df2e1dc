"""Speed profile and resolution lookup tables.

Both lookups are pure and total: unknown keys resolve to the balanced
profile and to "no scaling" respectively.
"""

from __future__ import annotations

from videocompress.policy.types import PresetTier, Resolution, SpeedMode, SpeedProfile

BALANCED_PROFILE = SpeedProfile(crf=26, preset=PresetTier.FAST, audio_bitrate="128k")

SPEED_PROFILES: dict[SpeedMode, SpeedProfile] = {
    SpeedMode.VERY_FAST_PREVIEW: SpeedProfile(
        crf=34, preset=PresetTier.FASTEST, audio_bitrate="96k", audio_channels=2
    ),
    SpeedMode.MAX_COMPRESSION: SpeedProfile(
        crf=36, preset=PresetTier.FASTEST, audio_bitrate="64k", audio_channels=1
    ),
    SpeedMode.ULTRA_FAST: SpeedProfile(
        crf=32, preset=PresetTier.FASTEST, audio_bitrate="96k"
    ),
    SpeedMode.SUPER_FAST: SpeedProfile(
        crf=30, preset=PresetTier.FASTEST, audio_bitrate="96k"
    ),
    SpeedMode.FAST: SpeedProfile(crf=28, preset=PresetTier.FAST, audio_bitrate="128k"),
    SpeedMode.BALANCED: BALANCED_PROFILE,
    SpeedMode.QUALITY: SpeedProfile(
        crf=23, preset=PresetTier.MEDIUM_FAST, audio_bitrate="128k"
    ),
}

# Scale targets as ffmpeg "W:H" strings
RESOLUTION_SCALES: dict[Resolution, str] = {
    Resolution.P360: "640:360",
    Resolution.P480: "854:480",
    Resolution.P720: "1280:720",
    Resolution.P1080: "1920:1080",
    Resolution.P1440: "2560:1440",
    Resolution.P2160: "3840:2160",
}


def get_speed_profile(mode: SpeedMode | str | None) -> SpeedProfile:
    """Look up the speed profile for a mode.

    Args:
        mode: SpeedMode or a wire name. AUTO, empty and unknown names all
            resolve to the balanced profile.

    Returns:
        The matching SpeedProfile.
    """
    if not isinstance(mode, SpeedMode):
        mode = SpeedMode.parse(mode) if mode else SpeedMode.BALANCED
    return SPEED_PROFILES.get(mode, BALANCED_PROFILE)


def get_scale_target(resolution: Resolution | str | None) -> str:
    """Return the "W:H" scale for a resolution tier, or "" to keep the original."""
    if not isinstance(resolution, Resolution):
        resolution = Resolution.parse(resolution)
    return RESOLUTION_SCALES.get(resolution, "")
