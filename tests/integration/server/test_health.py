"""Tests for GET /health."""

import pytest

from videocompress.config.models import AppConfig, TranscodeConfig
from videocompress.server.app import create_app
from videocompress.server.lifecycle import ServerLifecycle

pytestmark = pytest.mark.integration


class TestHealth:
    async def test_healthy(self, client):
        resp = await client.get("/health")

        assert resp.status == 200
        data = await resp.json()
        assert data["status"] == "healthy"
        assert data["ok"] is True
        assert data["ffmpeg"] == "available"
        assert data["service"] == "videocompress"
        assert "ai" in data["modes"]
        assert "/compress" in data["ui_routes"]
        assert data["defaults"]["codec"] == "h264"

    async def test_degraded_without_ffmpeg(self, aiohttp_client, tmp_path):
        config = AppConfig(
            transcode=TranscodeConfig(
                ffmpeg_path=tmp_path / "missing-ffmpeg",
                temp_directory=tmp_path / "work",
            )
        )
        client = await aiohttp_client(create_app(config))

        resp = await client.get("/health")

        assert resp.status == 200
        assert (await resp.json())["status"] == "degraded"

    async def test_unhealthy_while_shutting_down(self, aiohttp_client, app):
        lifecycle = ServerLifecycle()
        lifecycle.initiate_shutdown()
        app["lifecycle"] = lifecycle
        client = await aiohttp_client(app)

        resp = await client.get("/health")

        assert resp.status == 503
        data = await resp.json()
        assert data["status"] == "unhealthy"
        assert data["ok"] is False
        assert data["shutting_down"] is True
