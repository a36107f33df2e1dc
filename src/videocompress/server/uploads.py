"""Multipart upload handling for POST /compress.

The "file" part is streamed to disk chunk by chunk so multi-gigabyte
uploads never sit in memory. Every other part is read as a short text
field.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass, field
from pathlib import Path

from aiohttp import BodyPartReader, web

from videocompress.executor.errors import InvalidRequestError, UploadTooLargeError
from videocompress.server.cleanup import TEMP_FILE_PREFIX, remove_temp_file

logger = logging.getLogger(__name__)

FILE_FIELD = "file"
CHUNK_SIZE = 1024 * 1024
MAX_FIELD_BYTES = 4096
MAX_NAME_LENGTH = 100
DEFAULT_UPLOAD_NAME = "upload"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class UploadedFile:
    """An upload persisted to the temp directory."""

    path: Path
    original_name: str
    size_bytes: int
    fields: dict[str, str] = field(default_factory=dict)


def sanitize_filename(name: str | None) -> str:
    """Reduce a client-supplied filename to a safe basename.

    Directory components are dropped, unsafe characters become "_" and the
    result is capped in length. Falls back to "upload" when nothing usable
    remains.
    """
    if not name:
        return DEFAULT_UPLOAD_NAME
    base = Path(name.replace("\\", "/")).name
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).strip("._")
    if not cleaned:
        return DEFAULT_UPLOAD_NAME
    if len(cleaned) > MAX_NAME_LENGTH:
        stem, dot, ext = cleaned.rpartition(".")
        if dot and len(ext) <= 10:
            cleaned = f"{stem[: MAX_NAME_LENGTH - len(ext) - 1]}.{ext}"
        else:
            cleaned = cleaned[:MAX_NAME_LENGTH]
    return cleaned


def temp_upload_path(temp_dir: Path, original_name: str) -> Path:
    """Unique temp path for an upload: .vc_tmp_<hex>_<name>."""
    return temp_dir / f"{TEMP_FILE_PREFIX}{secrets.token_hex(8)}_{original_name}"


async def _stream_part_to_file(
    part: BodyPartReader,
    dest: Path,
    max_bytes: int,
) -> int:
    written = 0
    with dest.open("wb") as f:
        while True:
            chunk = await part.read_chunk(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise UploadTooLargeError(max_bytes)
            f.write(chunk)
    return written


async def save_upload(
    request: web.Request,
    temp_dir: Path,
    max_bytes: int,
) -> UploadedFile:
    """Persist the multipart upload of a request.

    Args:
        request: Incoming multipart/form-data request.
        temp_dir: Directory the upload is written to.
        max_bytes: Upload size limit.

    Returns:
        UploadedFile with the saved path and the other form fields.

    Raises:
        InvalidRequestError: The body is not multipart or has no file.
        UploadTooLargeError: The upload exceeds max_bytes. Nothing is left
            on disk.
    """
    # Allow one chunk of slack for multipart framing
    content_length = request.content_length
    if content_length is not None and content_length > max_bytes + CHUNK_SIZE:
        raise UploadTooLargeError(max_bytes)

    if not request.content_type.startswith("multipart/"):
        raise InvalidRequestError("Expected a multipart/form-data body")
    try:
        reader = await request.multipart()
    except ValueError as e:
        raise InvalidRequestError(f"Malformed multipart body: {e}") from e

    fields: dict[str, str] = {}
    upload: UploadedFile | None = None

    try:
        while True:
            part = await reader.next()
            if part is None:
                break
            if not isinstance(part, BodyPartReader):
                continue

            if part.name == FILE_FIELD and upload is None and part.filename:
                original_name = sanitize_filename(part.filename)
                dest = temp_upload_path(temp_dir, original_name)
                upload = UploadedFile(path=dest, original_name=original_name, size_bytes=0)
                upload.size_bytes = await _stream_part_to_file(part, dest, max_bytes)
                logger.debug(
                    "Saved upload %s (%d bytes) to %s",
                    original_name,
                    upload.size_bytes,
                    dest,
                )
            elif part.name:
                raw = await part.read(decode=True)
                fields[part.name] = raw[:MAX_FIELD_BYTES].decode("utf-8", errors="replace")
            else:
                await part.release()
    except BaseException:
        if upload is not None:
            remove_temp_file(upload.path)
        raise

    if upload is None:
        raise InvalidRequestError("Missing file")
    if upload.size_bytes == 0:
        remove_temp_file(upload.path)
        raise InvalidRequestError("Uploaded file is empty")

    upload.fields = fields
    return upload
