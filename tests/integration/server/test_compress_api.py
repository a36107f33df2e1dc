"""End-to-end tests for POST /compress in API mode."""

from pathlib import Path

import pytest

from videocompress.config.models import AppConfig, TranscodeConfig
from videocompress.policy.types import MEBIBYTE
from videocompress.server.app import create_app
from videocompress.server.cleanup import TEMP_FILE_PREFIX
from videocompress.server.lifecycle import ServerLifecycle
from videocompress.service import CompressionService

pytestmark = pytest.mark.integration

API_HEADERS = {"Accept": "application/octet-stream"}
UPLOAD_BYTES = 8 * 1024


class TestCompressApiMode:
    """Tests for streamed API responses."""

    async def test_returns_file_with_metadata_headers(self, client, make_form):
        resp = await client.post(
            "/compress", data=make_form(speed="fast"), headers=API_HEADERS
        )

        assert resp.status == 200
        body = await resp.read()
        assert len(body) == UPLOAD_BYTES
        assert resp.headers["Content-Type"] == "video/mp4"
        assert (
            resp.headers["Content-Disposition"]
            == 'attachment; filename="clip_compressed.mp4"'
        )
        assert resp.headers["X-Mode"] == "fast"
        assert resp.headers["X-Mode-Decider"] == "manual"
        assert resp.headers["X-Input-Bytes"] == str(UPLOAD_BYTES)
        assert resp.headers["X-Output-Bytes"] == str(UPLOAD_BYTES)
        assert resp.headers["X-Video-Codec"] == "h264"
        assert resp.headers["X-HW"] == "none"
        assert "X-Request-ID" in resp.headers

    async def test_api_form_flag_selects_api_mode(self, client, make_form):
        resp = await client.post("/compress", data=make_form(api="1", outExt="mov"))

        assert resp.status == 200
        assert resp.headers["Content-Type"] == "video/quicktime"
        assert resp.headers["X-Mode"] == "balanced"
        assert resp.headers["X-Mode-Decider"] == "automatic"

    async def test_api_query_flag_selects_api_mode(self, client, make_form):
        resp = await client.post("/compress?api=true", data=make_form())

        assert resp.status == 200
        assert resp.headers["X-Mode-Decider"] == "automatic"

    async def test_hardware_failure_falls_back_to_software(
        self, aiohttp_client, app_config, make_form
    ):
        # Inputs under 10 MB never use hardware, so upload a larger file
        app_config.server.max_upload_bytes = 16 * MEBIBYTE
        client = await aiohttp_client(create_app(app_config))

        resp = await client.post(
            "/compress",
            data=make_form(size_bytes=11 * MEBIBYTE, hw="on"),
            headers=API_HEADERS,
        )

        assert resp.status == 200
        assert resp.headers["X-HW"] == "none"
        assert resp.headers["X-Mode"] == "balanced"
        assert len(await resp.read()) == 11 * MEBIBYTE

    async def test_temp_files_removed(self, client, make_form, work_dir: Path):
        resp = await client.post("/compress", data=make_form(), headers=API_HEADERS)
        await resp.read()

        assert list(work_dir.glob(f"{TEMP_FILE_PREFIX}*")) == []

    async def test_client_request_id_echoed(self, client, make_form):
        resp = await client.post(
            "/compress",
            data=make_form(),
            headers={**API_HEADERS, "X-Request-ID": "client-req-1"},
        )
        assert resp.headers["X-Request-ID"] == "client-req-1"


class TestCompressApiErrors:
    """Tests for JSON error responses."""

    async def test_missing_file(self, client, make_fields_only):
        resp = await client.post(
            "/compress", data=make_fields_only(speed="fast"), headers=API_HEADERS
        )

        assert resp.status == 400
        data = await resp.json()
        assert data == {"error": "Missing file", "code": "INVALID_REQUEST"}

    async def test_urlencoded_body_rejected(self, client):
        resp = await client.post(
            "/compress", data={"speed": "fast"}, headers=API_HEADERS
        )

        assert resp.status == 400
        assert "multipart" in (await resp.json())["error"]

    async def test_empty_file(self, client, make_form):
        resp = await client.post(
            "/compress", data=make_form(size_bytes=0), headers=API_HEADERS
        )

        assert resp.status == 400
        assert (await resp.json())["error"] == "Uploaded file is empty"

    async def test_upload_too_large(self, client, make_form, work_dir: Path):
        resp = await client.post(
            "/compress", data=make_form(size_bytes=80 * 1024), headers=API_HEADERS
        )

        assert resp.status == 413
        assert (await resp.json())["code"] == "UPLOAD_TOO_LARGE"
        assert list(work_dir.glob(f"{TEMP_FILE_PREFIX}*")) == []

    async def test_invalid_bitrate(self, client, make_form):
        resp = await client.post(
            "/compress", data=make_form(ab="loud"), headers=API_HEADERS
        )

        assert resp.status == 400
        data = await resp.json()
        assert data["code"] == "VALIDATION_FAILED"
        assert data["details"][0]["field"] == "ab"

    async def test_ffmpeg_failure_reports_stderr(
        self, aiohttp_client, make_form, tmp_path: Path
    ):
        failing = tmp_path / "failing-ffmpeg"
        failing.write_text("#!/bin/sh\necho 'Invalid data found' >&2\nexit 1\n")
        failing.chmod(0o755)
        config = AppConfig(
            transcode=TranscodeConfig(
                ffmpeg_path=failing, temp_directory=tmp_path / "work"
            )
        )
        client = await aiohttp_client(create_app(config))

        resp = await client.post("/compress", data=make_form(), headers=API_HEADERS)

        assert resp.status == 500
        data = await resp.json()
        assert data["code"] == "TRANSCODE_FAILED"
        assert "Invalid data found" in data["details"]["stderr"]

    async def test_ffmpeg_spawn_failure_returns_json(
        self, aiohttp_client, app_config, make_form, work_dir: Path
    ):
        async def vanished_binary(cmd, timeout):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        service = CompressionService(app_config.transcode, runner=vanished_binary)
        client = await aiohttp_client(create_app(app_config, service=service))

        resp = await client.post("/compress", data=make_form(), headers=API_HEADERS)

        assert resp.status == 500
        data = await resp.json()
        assert data["code"] == "TRANSCODE_FAILED"
        assert "Could not start ffmpeg" in data["error"]
        assert list(work_dir.glob(f"{TEMP_FILE_PREFIX}*")) == []

    async def test_shutting_down(self, aiohttp_client, app, make_form):
        lifecycle = ServerLifecycle()
        lifecycle.initiate_shutdown()
        app["lifecycle"] = lifecycle
        client = await aiohttp_client(app)

        resp = await client.post("/compress", data=make_form(), headers=API_HEADERS)

        assert resp.status == 503
        assert (await resp.json())["code"] == "SHUTTING_DOWN"
