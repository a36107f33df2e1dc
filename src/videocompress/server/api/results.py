"""Download and metadata endpoints for stored results.

Endpoints:
    GET /dl/{result_id}?name= - Download a compressed file
    GET /meta/{result_id} - Result metadata as JSON
"""

from __future__ import annotations

import logging
import re

from aiohttp import web

from videocompress.results import ResultRecord, ResultStore
from videocompress.server.api.compress import content_disposition, content_type_for
from videocompress.server.api.errors import NOT_FOUND, api_error
from videocompress.server.uploads import sanitize_filename

logger = logging.getLogger(__name__)

RESULT_ID_PATTERN = re.compile(r"^[0-9a-f]{1,64}$")


def _lookup(request: web.Request) -> ResultRecord | None:
    result_id = request.match_info["result_id"]
    if not RESULT_ID_PATTERN.match(result_id):
        return None
    store: ResultStore = request.app["store"]
    return store.get(result_id)


async def download_handler(request: web.Request) -> web.StreamResponse:
    """Handle GET /dl/{result_id}.

    The optional ``name`` query parameter sets the download filename and,
    through its extension, the Content-Type.
    """
    record = _lookup(request)
    if record is None or not record.file_path.is_file():
        raise web.HTTPNotFound()

    name = request.query.get("name")
    filename = sanitize_filename(name) if name else record.filename
    headers = {
        "Content-Type": content_type_for(filename),
        "Content-Disposition": content_disposition(filename),
    }
    logger.debug("Serving result %s as %s", record.id, filename)
    return web.FileResponse(record.file_path, headers=headers)


async def metadata_handler(request: web.Request) -> web.Response:
    """Handle GET /meta/{result_id}."""
    record = _lookup(request)
    if record is None:
        return api_error("Result not found", code=NOT_FOUND, status=404)
    return web.json_response(record.to_metadata())


def setup_result_routes(app: web.Application) -> None:
    """Register result download and metadata routes.

    Args:
        app: aiohttp Application to configure.
    """
    app.router.add_get("/dl/{result_id}", download_handler)
    app.router.add_get("/meta/{result_id}", metadata_handler)
