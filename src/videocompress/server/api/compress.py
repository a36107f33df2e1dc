"""POST /compress: upload, transcode and return the result.

Two response modes share the same pipeline:
- API mode (``Accept: application/octet-stream`` or ``api=1``): the output
  is streamed back with X-* metadata headers and deleted afterwards.
  Errors are JSON.
- UI mode: the output is kept in the result store and an HTML result
  page with a download link is rendered. Errors are HTML pages.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiohttp_jinja2
from aiohttp import web
from pydantic import ValidationError

from videocompress.config.loader import get_temp_directory
from videocompress.config.models import AppConfig
from videocompress.core.formatting import format_file_size
from videocompress.executor.errors import VideoCompressError
from videocompress.logging import get_request_id
from videocompress.results import ResultRecord, ResultStore
from videocompress.server.api.errors import (
    VALIDATION_FAILED,
    api_error,
    api_error_from_exception,
)
from videocompress.server.api.middleware import shutdown_check_middleware
from videocompress.server.api.models import CompressForm, is_true_flag
from videocompress.server.cleanup import remove_temp_file
from videocompress.server.uploads import save_upload
from videocompress.service import CompressionService, compressed_output_path

logger = logging.getLogger(__name__)

API_ACCEPT_TYPE = "application/octet-stream"

OUTPUT_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
}


def wants_api_response(request: web.Request, form: CompressForm | None = None) -> bool:
    """True for API mode: an octet-stream Accept header or the api flag."""
    if API_ACCEPT_TYPE in request.headers.get("Accept", ""):
        return True
    if is_true_flag(request.query.get("api")):
        return True
    return form is not None and form.api


def content_type_for(filename: str) -> str:
    """Content-Type for a download, chosen by the file extension."""
    return OUTPUT_CONTENT_TYPES.get(Path(filename).suffix.casefold(), API_ACCEPT_TYPE)


def content_disposition(filename: str) -> str:
    safe = filename.replace('"', "").replace("\r", "").replace("\n", "")
    return f'attachment; filename="{safe}"'


def suggested_download_name(original_name: str, output_extension: str) -> str:
    """Download name offered to the client: "<stem>_compressed<ext>"."""
    return f"{Path(original_name).stem}_compressed{output_extension}"


def render_error_page(
    request: web.Request, message: str, status: int
) -> web.Response:
    """Render the HTML error page used in UI mode."""
    return aiohttp_jinja2.render_template(
        "errors/error.html",
        request,
        {"status": status, "error_message": message},
        status=status,
    )


def _error_response(
    request: web.Request, error: VideoCompressError, api_mode: bool
) -> web.Response:
    if api_mode:
        return api_error_from_exception(error)
    return render_error_page(request, str(error), error.status)


def _validation_error_response(
    request: web.Request, fields: dict[str, str], error: ValidationError
) -> web.Response:
    details = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]
    if wants_api_response(request) or is_true_flag(fields.get("api")):
        return api_error("Invalid form fields", code=VALIDATION_FAILED, details=details)
    message = "; ".join(f"{d['field']}: {d['message']}" for d in details)
    return render_error_page(request, message, 400)


async def _stream_result(
    request: web.Request, record: ResultRecord, download_name: str
) -> web.StreamResponse:
    headers = record.to_headers()
    headers["Content-Type"] = content_type_for(download_name)
    headers["Content-Disposition"] = content_disposition(download_name)
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id

    response = web.FileResponse(record.file_path, headers=headers)
    try:
        await response.prepare(request)
    finally:
        remove_temp_file(record.file_path)
    return response


@shutdown_check_middleware
async def compress_handler(request: web.Request) -> web.StreamResponse:
    """Handle POST /compress.

    Returns:
        The compressed file (API mode), the rendered result page (UI mode),
        or an error response in the matching format.
    """
    config: AppConfig = request.app["config"]
    service: CompressionService = request.app["service"]
    store: ResultStore = request.app["store"]

    api_mode = wants_api_response(request)
    upload = None
    try:
        upload = await save_upload(
            request,
            get_temp_directory(config.transcode),
            config.server.max_upload_bytes,
        )
        try:
            form = CompressForm.model_validate(upload.fields)
        except ValidationError as e:
            return _validation_error_response(request, upload.fields, e)

        api_mode = wants_api_response(request, form)
        encode_request = form.to_request(service.default_hardware)
        output_path = compressed_output_path(
            upload.path, encode_request.output_extension
        )

        logger.info(
            "Compress request: file=%s size=%s speed=%s api=%s",
            upload.original_name,
            format_file_size(upload.size_bytes),
            form.speed.value,
            api_mode,
        )
        record = await service.compress(
            encode_request,
            upload.path,
            output_path,
            input_bytes=upload.size_bytes,
        )
    except VideoCompressError as e:
        logger.warning("Compress request failed: %s (%s)", e, e.code)
        return _error_response(request, e, api_mode)
    finally:
        if upload is not None:
            remove_temp_file(upload.path)

    download_name = suggested_download_name(
        upload.original_name, encode_request.output_extension
    )
    if api_mode:
        return await _stream_result(request, record, download_name)

    store.put(record)
    return aiohttp_jinja2.render_template(
        "result.html",
        request,
        {"record": record, "download_name": download_name},
    )


def setup_compress_routes(app: web.Application) -> None:
    """Register the compress endpoint.

    Args:
        app: aiohttp Application to configure.
    """
    app.router.add_post("/compress", compress_handler)
