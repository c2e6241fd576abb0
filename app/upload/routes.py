"""
Upload API routes.

This module exposes the upload subsystem over HTTP:
- AJAX uploads, carrying files directly or a reference to a previous upload
- Plain HTTP uploads, answered with the HTML handoff page
- Health check

The upload step itself runs as a dependency, so any endpoint can receive
the processed files by depending on ``process_ajax_uploads``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from loguru import logger

from ferry_core.runtime.errors import ConfigurationError, StorageAccessError, UploadError

from .coordinator import FilesByField
from .factory import build_gate, get_upload_config, is_upload_enabled
from .gate import UPLOAD_REFERENCE_KEY, RequestGate
from .response import UploadResponse
from .schemas import FileRecord, UploadedFilesResponse, UploadHealth
from .transport import UploadRequest

router = APIRouter()


def status_for_upload_error(error: UploadError) -> int:
    """Server-side failures map to 500, bad client input to 400."""
    if isinstance(error, (ConfigurationError, StorageAccessError)):
        return 500
    return 400


def _http_error(error: UploadError) -> HTTPException:
    status_code = status_for_upload_error(error)
    logger.warning(
        f"Upload request failed with {error.code} ({status_code}), "
        f"debug_id={error.debug_id}: {error.message_debug or error.message_safe}"
    )
    return HTTPException(status_code=status_code, detail=error.to_dict())


async def read_upload_request(request: Request) -> UploadRequest:
    return await UploadRequest.from_starlette(request)


def get_upload_gate() -> RequestGate:
    return build_gate()


def get_upload_enabled() -> bool:
    return is_upload_enabled()


def process_ajax_uploads(
    upload_request: UploadRequest = Depends(read_upload_request),
    gate: RequestGate = Depends(get_upload_gate),
    enabled: bool = Depends(get_upload_enabled),
) -> FilesByField:
    """
    Store the files uploaded with an AJAX request.

    Returns:
        dict: The processed files; empty when uploads are disabled or the
        request carries none.

    Raises:
        HTTPException: 400 or 500 with the upload error details.
    """
    if not enabled:
        logger.debug("Upload processing is disabled")
        return {}
    if not gate.can_process_request(upload_request):
        return {}
    try:
        gate.process_request(upload_request)
    except UploadError as e:
        raise _http_error(e) from e
    return gate.files()


def process_http_upload(
    upload_request: UploadRequest = Depends(read_upload_request),
    gate: RequestGate = Depends(get_upload_gate),
    enabled: bool = Depends(get_upload_enabled),
) -> UploadResponse | None:
    """
    Store the files of a plain HTTP upload and build its handoff page.

    A ``jxnupl`` reference is refused here without reading it: the temp
    file is single use and only the AJAX route returns its files.
    """
    if not enabled or not gate.can_process_request(upload_request):
        return None
    if gate.has_upload_reference(upload_request):
        logger.warning("Rejected upload reference sent to the plain HTTP route")
        raise HTTPException(
            status_code=400,
            detail=f"Upload references ({UPLOAD_REFERENCE_KEY}) are read by /upload/ajax",
        )
    gate.mark_http_upload()
    try:
        gate.process_request(upload_request)
    except UploadError as e:
        raise _http_error(e) from e
    return gate.response


@router.get("/health", response_model=UploadHealth)
def upload_health():
    """Health check for the upload module."""
    config = get_upload_config()
    return UploadHealth(
        status="ok",
        module="upload",
        enabled=is_upload_enabled(),
        storage=config.get_string("upload.default.storage", "local"),
    )


@router.post("/ajax", response_model=UploadedFilesResponse)
def ajax_upload(files: FilesByField = Depends(process_ajax_uploads)):
    """
    Handle an AJAX upload.

    The request carries the files as multipart parts, or a ``jxnupl``
    reference (form field, JSON key or query parameter) returned by a
    previous plain HTTP upload.

    Returns:
        UploadedFilesResponse: Stored file records, grouped by field.
    """
    return UploadedFilesResponse(
        files={
            field: [FileRecord.from_descriptor(descriptor) for descriptor in descriptors]
            for field, descriptors in files.items()
        }
    )


@router.post("/http", response_class=HTMLResponse)
def http_upload(upload_response: UploadResponse | None = Depends(process_http_upload)):
    """
    Handle a plain HTTP (hidden frame) upload.

    Returns:
        HTMLResponse: Page setting ``res`` to the temp handle (200) or the
        error message (500).
    """
    if upload_response is None:
        raise HTTPException(status_code=400, detail="No uploaded file in request")
    return upload_response.to_http_response()
