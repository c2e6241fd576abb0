"""
Unit tests for the transport-layer request view.
"""

import io

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.datastructures import Headers, UploadFile

from app.upload.transport import TransportErrorCode, TransportFile, UploadRequest


class TestTransportFile:
    """Tests for wrapping uploaded parts."""

    def test_from_bytes(self):
        part = TransportFile.from_bytes("a.txt", b"hello", "text/plain")

        assert part.size == 5
        assert part.error == TransportErrorCode.OK
        assert part.get_contents() == b"hello"

    def test_get_contents_rewinds(self):
        part = TransportFile.from_bytes("a.txt", b"hello")
        part.stream.read()

        assert part.get_contents() == b"hello"

    def test_from_upload_file(self):
        upload = UploadFile(
            file=io.BytesIO(b"png-bytes"),
            filename="a.png",
            headers=Headers({"content-type": "image/png"}),
        )

        part = TransportFile.from_upload_file(upload)

        assert part.client_filename == "a.png"
        assert part.client_media_type == "image/png"
        assert part.size == len(b"png-bytes")
        assert part.error == TransportErrorCode.OK

    def test_empty_filename_is_no_file(self):
        upload = UploadFile(file=io.BytesIO(b""), filename="")

        assert TransportFile.from_upload_file(upload).error == TransportErrorCode.NO_FILE

    def test_oversized_part(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 11), filename="a.bin", size=11)

        part = TransportFile.from_upload_file(upload, max_part_size=10)

        assert part.error == TransportErrorCode.INI_SIZE


class TestUploadRequestFromStarlette:
    """Tests for reducing a Starlette request."""

    def test_multipart_files_and_fields(self, client):
        response = client.post(
            "/echo?page=2",
            files=[
                ("image", ("a.png", b"aaa", "image/png")),
                ("docs", ("b.txt", b"bb", "text/plain")),
                ("docs", ("c.txt", b"c", "text/plain")),
            ],
            data={"title": "Holiday"},
        )

        data = response.json()
        assert data["files"] == {"image": ["a.png"], "docs": ["b.txt", "c.txt"]}
        assert data["single"] == {"image": True, "docs": False}
        assert data["body"] == {"title": "Holiday"}
        assert data["query"] == {"page": "2"}

    def test_urlencoded_body(self, client):
        response = client.post("/echo", data={"jxnupl": "abc123"})

        assert response.json()["body"] == {"jxnupl": "abc123"}
        assert response.json()["files"] == {}

    def test_json_object_body(self, client):
        response = client.post("/echo", json={"jxnupl": "abc123"})

        assert response.json()["body"] == {"jxnupl": "abc123"}

    def test_json_array_body_is_not_a_mapping(self, client):
        response = client.post("/echo?jxnupl=abc123", json=["x"])

        assert response.json()["body"] is None
        assert response.json()["query"] == {"jxnupl": "abc123"}


# --- Fixtures ---


@pytest.fixture
def client():
    app = FastAPI()

    @app.post("/echo")
    async def echo(request: Request):
        upload_request = await UploadRequest.from_starlette(request)
        files = {}
        single = {}
        for field, parts in upload_request.uploaded_files.items():
            single[field] = isinstance(parts, TransportFile)
            parts = [parts] if isinstance(parts, TransportFile) else parts
            files[field] = [part.client_filename for part in parts]
        return {
            "files": files,
            "single": single,
            "body": upload_request.parsed_body,
            "query": dict(upload_request.query_params),
        }

    return TestClient(app)
