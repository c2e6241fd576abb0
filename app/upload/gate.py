"""
Request gate: decides whether a request carries uploads and processes it.

Three modes are supported:
- deferred: the request carries a ``jxnupl`` reference to descriptors saved
  by an earlier plain HTTP upload
- AJAX: the request carries the files directly
- plain HTTP: the files are stored, their descriptors saved to a temp file,
  and an HTML page holding the reference is returned
"""

from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from .coordinator import FilesByField, NameSanitizer, UploadCoordinator
from .response import UploadResponse
from .transport import UploadRequest

UPLOAD_REFERENCE_KEY = "jxnupl"


class RequestGate:
    """
    Entry point of the upload subsystem for one request.

    Usage:
        gate = RequestGate(coordinator)
        if gate.can_process_request(upload_request):
            gate.process_request(upload_request)
            files = gate.files()
    """

    def __init__(self, coordinator: UploadCoordinator, debug: bool = False):
        self.coordinator = coordinator
        self.debug = debug
        self.response: UploadResponse | None = None
        self._files: FilesByField = {}
        self._is_ajax_request = True
        self._temp_handle = ""

    def sanitizer(self, sanitizer: NameSanitizer | None) -> None:
        """Set the callable that rewrites uploaded file names."""
        self.coordinator.set_name_sanitizer(sanitizer)

    def files(self) -> FilesByField:
        return self._files

    def mark_http_upload(self) -> None:
        """Switch the current request to plain HTTP mode."""
        self._is_ajax_request = False

    @property
    def is_ajax_request(self) -> bool:
        return self._is_ajax_request

    @staticmethod
    def _reference_source(request: UploadRequest) -> Mapping[str, Any]:
        if isinstance(request.parsed_body, Mapping):
            return request.parsed_body
        return request.query_params

    def can_process_request(self, request: UploadRequest) -> bool:
        if len(request.uploaded_files) > 0:
            return True
        return UPLOAD_REFERENCE_KEY in self._reference_source(request)

    def _reference_value(self, request: UploadRequest) -> str:
        value = self._reference_source(request).get(UPLOAD_REFERENCE_KEY)
        return str(value).strip() if value is not None else ""

    def has_upload_reference(self, request: UploadRequest) -> bool:
        """Whether the request names descriptors saved by an earlier upload."""
        return self._reference_value(request) != ""

    def _read_temp_handle(self, request: UploadRequest) -> bool:
        self._temp_handle = self._reference_value(request)
        return self._temp_handle != ""

    def process_request(self, request: UploadRequest) -> bool:
        """
        Process the uploads carried by the request.

        In deferred and AJAX modes, upload errors propagate to the caller.
        In plain HTTP mode they are caught and turned into an error
        response, since the client reads the outcome from the HTML page.

        Returns:
            bool: Always True once the request was handled.
        """
        if self._read_temp_handle(request):
            self._files = self.coordinator.read_from_temp_file(self._temp_handle)
            return True

        if self._is_ajax_request:
            self._files = self.coordinator.read_from_http_data(request)
            return True

        try:
            self._files = self.coordinator.read_from_http_data(request)
            handle = self.coordinator.save_to_temp_file(self._files)
            self.response = UploadResponse(handle=handle)
        except Exception as e:
            logger.warning(f"Plain HTTP upload failed: {e!r}")
            message = getattr(e, "message_safe", None) or str(e)
            self.response = UploadResponse(error=message)
            if self.debug and getattr(e, "message_debug", None):
                self.response.add_debug_message(e.message_debug)
        return True
