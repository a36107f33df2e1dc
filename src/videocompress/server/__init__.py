"""aiohttp server for videocompress (`videocompress serve`)."""

from videocompress.server.app import create_app

__all__ = ["create_app"]
