"""CLI compress command: run the full pipeline on a local file."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from videocompress.cli.exit_codes import ExitCode, exit_code_for
from videocompress.cli.options import (
    build_request,
    config_option,
    encode_options,
    load_config_or_exit,
)
from videocompress.core.formatting import (
    format_duration_ms,
    format_file_size,
    format_throughput,
)
from videocompress.executor.errors import VideoCompressError
from videocompress.results import ResultRecord
from videocompress.service import CompressionService, compressed_output_path


def format_result(record: ResultRecord) -> str:
    """Human-readable summary of a finished compression."""
    lines = [
        f"Output:     {record.file_path}",
        f"Mode:       {record.mode} ({record.mode_decider})",
        f"Size:       {format_file_size(record.input_bytes)} -> "
        f"{format_file_size(record.output_bytes)} "
        f"({record.compression_ratio:.1f}%)",
        f"Codecs:     {record.video_codec} / {record.audio_codec}",
        f"Hardware:   {record.hardware}",
        f"Time:       {format_duration_ms(record.elapsed_ms)} "
        f"({format_throughput(record.throughput_mb_s)})",
    ]
    return "\n".join(lines)


@click.command("compress")
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
    help="Output path (default: <input>_compressed<ext> next to the input).",
)
@encode_options
@config_option
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def compress_command(
    input_file: Path,
    output_path: Path | None,
    config_path: Path | None,
    json_output: bool,
    **encode_args: str | int | None,
) -> None:
    """Compress INPUT_FILE with ffmpeg.

    Uses the same size-aware mode selection and hardware fallback as the
    web service.

    \b
    Examples:
        videocompress compress clip.mov
        videocompress compress clip.mov -o small.mp4 --speed max
        videocompress compress clip.mov --hw on --json
    """
    config = load_config_or_exit(config_path)
    service = CompressionService(config.transcode)
    request = build_request(service.default_hardware, **encode_args)

    output_path = output_path or compressed_output_path(
        input_file, request.output_extension
    )
    if output_path.resolve() == input_file.resolve():
        raise click.BadParameter(
            "Output must differ from the input", param_hint="--output"
        )

    try:
        record = asyncio.run(service.compress(request, input_file, output_path))
    except VideoCompressError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for(e))
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        sys.exit(ExitCode.INTERRUPTED)

    if json_output:
        payload = record.to_metadata()
        payload["output_path"] = str(record.file_path)
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(format_result(record))
