"""Audio argument building for FFmpeg transcoding."""

from videocompress.policy.types import AudioCodec, EncodeProfile, SpeedMode

AUDIO_ENCODERS: dict[AudioCodec, str] = {
    AudioCodec.AAC: "aac",
    AudioCodec.OPUS: "libopus",
}

# Fast-preview modes pin (bitrate, channels) whatever the profile says
FAST_PREVIEW_AUDIO: dict[SpeedMode, tuple[str, int]] = {
    SpeedMode.VERY_FAST_PREVIEW: ("96k", 2),
    SpeedMode.MAX_COMPRESSION: ("64k", 1),
}


def get_audio_encoder(codec: AudioCodec) -> str:
    """Map an abstract audio codec to its FFmpeg encoder name."""
    if codec is AudioCodec.COPY:
        return "copy"
    return AUDIO_ENCODERS[codec]


def build_audio_args(profile: EncodeProfile) -> list[str]:
    """Build FFmpeg arguments for the audio stream.

    Stream copy emits only ``-c:a copy``. Re-encoded audio gets the encoder
    and bitrate, then a channel count when one is fixed.

    Args:
        profile: Frozen encode profile.

    Returns:
        List of FFmpeg arguments for audio.
    """
    if profile.audio_codec is AudioCodec.COPY:
        return ["-c:a", "copy"]

    bitrate = profile.audio_bitrate
    channels = profile.audio_channels
    if profile.mode in FAST_PREVIEW_AUDIO:
        bitrate, channels = FAST_PREVIEW_AUDIO[profile.mode]

    args = ["-c:a", get_audio_encoder(profile.audio_codec), "-b:a", bitrate]
    if channels is not None:
        args.extend(["-ac", str(channels)])
    return args
