"""Fixtures for HTTP integration tests."""

from pathlib import Path

import pytest
from aiohttp import FormData, MultipartWriter

from videocompress.config.models import AppConfig, ServerConfig, TranscodeConfig
from videocompress.server.app import create_app

UPLOAD_BYTES = 8 * 1024


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def app_config(fake_ffmpeg: Path, work_dir: Path) -> AppConfig:
    return AppConfig(
        server=ServerConfig(max_upload_bytes=64 * 1024),
        transcode=TranscodeConfig(ffmpeg_path=fake_ffmpeg, temp_directory=work_dir),
    )


@pytest.fixture
def app(app_config: AppConfig):
    return create_app(app_config)


@pytest.fixture
async def client(aiohttp_client, app):
    return await aiohttp_client(app)


@pytest.fixture
def make_form():
    """Build a multipart body with a placeholder video and form fields."""

    def _make(
        filename: str = "clip.mov",
        size_bytes: int = UPLOAD_BYTES,
        **fields: str,
    ) -> FormData:
        data = FormData()
        data.add_field(
            "file",
            b"\0" * size_bytes,
            filename=filename,
            content_type="video/quicktime",
        )
        for name, value in fields.items():
            data.add_field(name, value)
        return data

    return _make


@pytest.fixture
def make_fields_only():
    """Build a multipart body with form fields but no file part."""

    def _make(**fields: str) -> MultipartWriter:
        writer = MultipartWriter("form-data")
        for name, value in fields.items():
            part = writer.append(value)
            part.set_content_disposition("form-data", name=name)
        return writer

    return _make
