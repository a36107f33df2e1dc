"""CLI plan command: show the encode decision without running ffmpeg."""

from __future__ import annotations

import json
import re
import shlex
from pathlib import Path

import click

from videocompress.cli.options import (
    build_request,
    config_option,
    encode_options,
    load_config_or_exit,
)
from videocompress.core.formatting import format_file_size
from videocompress.policy import EncodeProfile
from videocompress.policy.overrides import (
    LONG_EDGE_TARGETS,
    long_edge_dimensions,
    long_edge_scale_expression,
)
from videocompress.service import CompressionService, compressed_output_path

_SIZE_PATTERN = re.compile(r"^(\d+)[xX](\d+)$")


def _parse_source_size(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> tuple[int, int] | None:
    if value is None:
        return None
    match = _SIZE_PATTERN.match(value.strip())
    if not match or 0 in (int(match.group(1)), int(match.group(2))):
        raise click.BadParameter(f"expected WIDTHxHEIGHT, got {value!r}")
    return int(match.group(1)), int(match.group(2))


def resolve_output_size(
    profile: EncodeProfile, width: int, height: int
) -> tuple[int, int]:
    """Frame size ffmpeg will produce for a width x height source."""
    if not profile.scale:
        return width, height
    long_edge = LONG_EDGE_TARGETS.get(profile.mode)
    if long_edge is not None and profile.scale == long_edge_scale_expression(
        long_edge
    ):
        return long_edge_dimensions(width, height, long_edge)
    scaled_width, scaled_height = profile.scale.split(":")
    return int(scaled_width), int(scaled_height)


def format_plan(
    profile: EncodeProfile,
    command: list[str],
    input_bytes: int,
    output_size: tuple[int, int] | None = None,
) -> str:
    """Human-readable plan summary."""
    audio = profile.audio_codec.value
    if profile.audio_bitrate and audio != "copy":
        audio = f"{audio} {profile.audio_bitrate}"
        if profile.audio_channels:
            audio = f"{audio} ({profile.audio_channels} ch)"

    lines = [
        f"Input:    {format_file_size(input_bytes)}",
        f"Mode:     {profile.mode.value} ({profile.mode_decider.value})",
        f"Video:    {profile.video_codec.value} crf={profile.crf} "
        f"preset={profile.preset.value}",
        f"Audio:    {audio}",
        f"Scale:    {profile.scale or 'none'}",
    ]
    if output_size is not None:
        lines.append(f"Output:   {output_size[0]}x{output_size[1]}")
    lines += [
        f"Hardware: {profile.hardware.value}",
        f"Command:  {shlex.join(command)}",
    ]
    return "\n".join(lines)


@click.command("plan")
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output path (default: <input>_compressed<ext>).",
)
@encode_options
@config_option
@click.option(
    "--source-size",
    metavar="WxH",
    callback=_parse_source_size,
    default=None,
    help="Source frame size, to preview the scaled output size.",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def plan_command(
    input_file: Path,
    output_path: Path | None,
    config_path: Path | None,
    source_size: tuple[int, int] | None,
    json_output: bool,
    **encode_args: str | int | None,
) -> None:
    """Show the encode profile and ffmpeg command for INPUT_FILE.

    Nothing is run; the mode is chosen from the file size exactly as the
    server would.

    \b
    Examples:
        videocompress plan clip.mov
        videocompress plan clip.mov --speed turbo --resolution 720p
        videocompress plan clip.mov --json
        videocompress plan clip.mov --speed max --source-size 1080x1920
    """
    config = load_config_or_exit(config_path)
    service = CompressionService(config.transcode)
    request = build_request(service.default_hardware, **encode_args)

    output_path = output_path or compressed_output_path(
        input_file, request.output_extension
    )
    input_bytes = input_file.stat().st_size
    profile, command = service.plan(request, input_file, output_path, input_bytes)
    output_size = (
        resolve_output_size(profile, *source_size) if source_size else None
    )

    if json_output:
        click.echo(
            json.dumps(
                {
                    "input_bytes": input_bytes,
                    "profile": profile.to_dict(),
                    "command": command,
                    "output_size": list(output_size) if output_size else None,
                },
                indent=2,
            )
        )
    else:
        click.echo(format_plan(profile, command, input_bytes, output_size))
