"""
Transport-layer view of an incoming upload request.

The upload subsystem does not depend on Starlette directly: a request is
reduced to its uploaded parts, its parsed body and its query parameters.
``UploadRequest.from_starlette`` performs that reduction for FastAPI apps.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, BinaryIO, Mapping, Union

from loguru import logger
from starlette.datastructures import UploadFile
from starlette.requests import Request


class TransportErrorCode(IntEnum):
    """Per-file transport error codes, numbered like PHP's UPLOAD_ERR_* values."""

    OK = 0
    INI_SIZE = 1  # exceeds the server-wide maximum
    FORM_SIZE = 2  # exceeds the maximum declared by the form
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8  # blocked by a server extension


@dataclass
class TransportFile:
    """One uploaded part, as reported by the transport layer."""

    client_filename: str
    client_media_type: str
    size: int
    stream: BinaryIO | None = None
    error: TransportErrorCode = TransportErrorCode.OK

    @classmethod
    def from_bytes(
        cls,
        filename: str,
        content: bytes,
        media_type: str = "application/octet-stream",
        error: TransportErrorCode = TransportErrorCode.OK,
    ) -> "TransportFile":
        return cls(
            client_filename=filename,
            client_media_type=media_type,
            size=len(content),
            stream=io.BytesIO(content),
            error=error,
        )

    @classmethod
    def from_upload_file(
        cls, upload: UploadFile, max_part_size: int = 0
    ) -> "TransportFile":
        """
        Wrap a Starlette UploadFile.

        An empty filename means the browser submitted the field without a
        file; a part larger than ``max_part_size`` (when > 0) is reported
        as exceeding the server maximum.
        """
        stream = upload.file
        size = upload.size
        if size is None:
            position = stream.tell()
            stream.seek(0, 2)
            size = stream.tell()
            stream.seek(position)

        error = TransportErrorCode.OK
        if not upload.filename:
            error = TransportErrorCode.NO_FILE
        elif max_part_size > 0 and size > max_part_size:
            error = TransportErrorCode.INI_SIZE

        return cls(
            client_filename=upload.filename or "",
            client_media_type=upload.content_type or "application/octet-stream",
            size=size,
            stream=stream,
            error=error,
        )

    def get_contents(self) -> bytes:
        """Read the whole part from the start of its stream."""
        if self.stream is None:
            return b""
        self.stream.seek(0)
        return self.stream.read()


UploadedFiles = Mapping[str, Union[TransportFile, list[TransportFile]]]


@dataclass
class UploadRequest:
    """The parts of an HTTP request the upload subsystem looks at."""

    uploaded_files: UploadedFiles = field(default_factory=dict)
    parsed_body: Mapping[str, Any] | None = None
    query_params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    async def from_starlette(cls, request: Request, max_part_size: int = 0) -> "UploadRequest":
        """
        Build an UploadRequest from a Starlette/FastAPI request.

        Multipart and urlencoded bodies are split into uploaded files and
        plain values; a JSON object body is used as the parsed body.
        Repeated file fields become lists, in submission order.
        """
        content_type = request.headers.get("content-type", "")
        files: dict[str, list[TransportFile]] = {}
        body: dict[str, Any] | None = None

        if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
            form = await request.form()
            body = {}
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    files.setdefault(key, []).append(
                        TransportFile.from_upload_file(value, max_part_size)
                    )
                else:
                    body[key] = value
        elif content_type.startswith("application/json"):
            raw = await request.body()
            if raw:
                try:
                    decoded = json.loads(raw)
                except ValueError:
                    logger.warning("Ignoring malformed JSON body on upload request")
                    decoded = None
                if isinstance(decoded, dict):
                    body = decoded

        uploaded: dict[str, TransportFile | list[TransportFile]] = {
            key: parts[0] if len(parts) == 1 else parts for key, parts in files.items()
        }
        return cls(
            uploaded_files=uploaded,
            parsed_body=body,
            query_params=dict(request.query_params),
        )
