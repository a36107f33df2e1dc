"""Options and helpers shared by CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from videocompress.cli.exit_codes import ExitCode
from videocompress.config import AppConfig, ConfigError, get_config
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
)

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.videocompress/config.toml).",
)


def encode_options(func):
    """Attach the encoding options shared by `plan` and `compress`."""
    options = [
        click.option(
            "--speed",
            "-s",
            default=SpeedMode.AUTO.value,
            show_default=True,
            help="Speed mode: ai, turbo, max, ultra_fast, super_fast, fast, "
            "balanced or quality.",
        ),
        click.option(
            "--resolution",
            "-r",
            default=Resolution.ORIGINAL.value,
            show_default=True,
            help="Target resolution (original, 360p ... 2160p).",
        ),
        click.option(
            "--codec",
            default=VideoCodec.H264.value,
            show_default=True,
            help="Video codec: h264, h265 or copy.",
        ),
        click.option(
            "--audio",
            default=AudioCodec.AAC.value,
            show_default=True,
            help="Audio codec: aac, opus or copy.",
        ),
        click.option("--audio-bitrate", "ab", default=None, help="Audio bitrate, e.g. 160k."),
        click.option(
            "--hw",
            default=HardwareAccel.NONE.value,
            show_default=True,
            help="Hardware encoding: none, on, videotoolbox or nvenc.",
        ),
        click.option("--fps", type=int, default=None, help="Force frame rate (1-60)."),
        click.option(
            "--ext",
            "out_ext",
            type=click.Choice([".mp4", ".mov", "mp4", "mov"], case_sensitive=False),
            default=".mp4",
            show_default=True,
            help="Output container.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_request(
    default_hardware: HardwareAccel,
    *,
    speed: str,
    resolution: str,
    codec: str,
    audio: str,
    ab: str | None,
    hw: str,
    fps: int | None,
    out_ext: str,
) -> EncodeRequest:
    """Normalize CLI option values into an EncodeRequest.

    Raises:
        click.BadParameter: If the audio bitrate is malformed.
    """
    try:
        audio_bitrate = normalize_audio_bitrate(ab)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--audio-bitrate") from e
    return EncodeRequest(
        mode=SpeedMode.parse(speed),
        resolution=Resolution.parse(resolution),
        video_codec=VideoCodec.parse(codec),
        audio_codec=AudioCodec.parse(audio),
        hardware=HardwareAccel.parse(hw, default_hardware),
        fps=parse_fps(fps),
        output_extension=normalize_output_extension(out_ext),
        audio_bitrate=audio_bitrate,
    )


def load_config_or_exit(config_path: Path | None) -> AppConfig:
    """Load configuration, exiting with CONFIG_ERROR if it is invalid."""
    try:
        return get_config(config_path=config_path)
    except (ConfigError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)
