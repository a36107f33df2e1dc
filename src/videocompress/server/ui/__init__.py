"""Web UI for videocompress."""

from videocompress.server.ui.routes import setup_ui_routes

__all__ = ["setup_ui_routes"]
