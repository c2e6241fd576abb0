"""
Tests for the upload API routes.

The routes run against the real app with an in-memory storage resolver
injected through FastAPI dependency overrides.
"""

import json
import re

import pytest
from fastapi.testclient import TestClient

from app.upload.factory import build_gate
from app.upload.resolver import StorageResolver
from app.upload.routes import get_upload_enabled, get_upload_gate, status_for_upload_error
from ferry_core.config import UploadConfig
from ferry_core.i18n import Translator
from ferry_core.runtime.errors import (
    ConfigurationError,
    InvalidReferenceError,
    StorageAccessError,
    UploadTransportError,
    ValidationError,
)


def extract_result(html):
    return json.loads(re.search(r"res = (.*);\n", html).group(1))


class TestAjaxUpload:
    """Tests for POST /upload/ajax."""

    def test_returns_stored_files(self, client):
        response = client.post(
            "/upload/ajax",
            files=[
                ("image", ("white.png", b"w" * 30, "image/png")),
                ("image", ("blue.png", b"b" * 200, "image/png")),
            ],
        )

        assert response.status_code == 200
        records = response.json()["files"]["image"]
        assert [r["name"] for r in records] == ["white", "blue"]
        assert records[0]["type"] == "image/png"
        assert records[1]["size"] == 200

    def test_request_without_files(self, client):
        response = client.post("/upload/ajax", data={"title": "Holiday"})

        assert response.status_code == 200
        assert response.json() == {"files": {}}

    def test_validation_error_is_400(self, client, resolver):
        resolver.config.set("upload.default.extensions", ["png"])

        response = client.post("/upload/ajax", files={"doc": ("a.exe", b"MZ", "application/octet-stream")})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "UPLOAD_INVALID"
        assert detail["message"] == "The file extension exe is not allowed."

    def test_storage_error_is_500(self, client, resolver):
        resolver.config.set("upload.files.doc", {"storage": "memory", "options": {"visibility": "private"}})

        response = client.post("/upload/ajax", files={"doc": ("a.txt", b"a", "text/plain")})

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "UPLOAD_ACCESS"

    def test_invalid_reference_is_400(self, client):
        response = client.post("/upload/ajax?jxnupl=../../etc/passwd")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "UPLOAD_REFERENCE"

    def test_disabled_uploads_are_ignored(self, client):
        client.app.dependency_overrides[get_upload_enabled] = lambda: False

        response = client.post("/upload/ajax", files={"image": ("a.png", b"a", "image/png")})

        assert response.status_code == 200
        assert response.json() == {"files": {}}


class TestHttpUploadHandoff:
    """Tests for POST /upload/http followed by the AJAX call."""

    def test_http_upload_then_ajax_reference(self, client):
        page = client.post("/upload/http", files={"image": ("white.png", b"white", "image/png")})

        assert page.status_code == 200
        assert page.headers["content-type"].startswith("text/html")
        result = extract_result(page.text)
        assert result["code"] == "success"

        response = client.post("/upload/ajax", data={"jxnupl": result["upl"]})

        assert response.status_code == 200
        assert response.json()["files"]["image"][0]["filename"] == "white.png"

    def test_reference_in_json_body(self, client):
        page = client.post("/upload/http", files={"image": ("white.png", b"white", "image/png")})
        handle = extract_result(page.text)["upl"]

        response = client.post("/upload/ajax", json={"jxnupl": handle})

        assert response.json()["files"]["image"][0]["name"] == "white"

    def test_reference_is_single_use(self, client):
        page = client.post("/upload/http", files={"image": ("white.png", b"white", "image/png")})
        handle = extract_result(page.text)["upl"]
        client.post(f"/upload/ajax?jxnupl={handle}")

        response = client.post(f"/upload/ajax?jxnupl={handle}")

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "UPLOAD_ACCESS"

    def test_http_upload_error_page(self, client, resolver):
        resolver.config.set("upload.default.max-size", 3)

        page = client.post("/upload/http", files={"image": ("white.png", b"white", "image/png")})

        assert page.status_code == 500
        assert extract_result(page.text) == {
            "code": "error",
            "msg": "The file size 5 exceeds the maximum allowed.",
        }

    def test_reference_on_http_route_keeps_temp_file(self, client):
        page = client.post("/upload/http", files={"image": ("white.png", b"white", "image/png")})
        handle = extract_result(page.text)["upl"]

        rejected = client.post("/upload/http", data={"jxnupl": handle})

        assert rejected.status_code == 400
        response = client.post("/upload/ajax", data={"jxnupl": handle})
        assert response.status_code == 200
        assert response.json()["files"]["image"][0]["filename"] == "white.png"

    def test_http_upload_without_files(self, client):
        response = client.post("/upload/http", data={"title": "Holiday"})

        assert response.status_code == 400


class TestUploadHealth:
    """Tests for GET /upload/health."""

    def test_health(self, client):
        response = client.get("/upload/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["module"] == "upload"


class TestStatusMapping:
    """Tests for upload error to HTTP status mapping."""

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (ConfigurationError("x"), 500),
            (StorageAccessError("x"), 500),
            (ValidationError("x"), 400),
            (UploadTransportError("x", transport_code=3), 400),
            (InvalidReferenceError("x"), 400),
        ],
    )
    def test_status_for_upload_error(self, error, status_code):
        assert status_for_upload_error(error) == status_code


# --- Fixtures ---


@pytest.fixture
def resolver():
    config = UploadConfig({"upload": {"default": {"storage": "memory"}}})
    resolver = StorageResolver(config, Translator(locale="en"))
    resolver.register_default_backends()
    return resolver


@pytest.fixture
def client(resolver):
    """
    Provides a TestClient for the app, with uploads stored in memory.
    """
    from app.main import app

    app.dependency_overrides[get_upload_gate] = lambda: build_gate(
        resolver=resolver, translator=Translator(locale="en")
    )
    app.dependency_overrides[get_upload_enabled] = lambda: True
    yield TestClient(app)
    app.dependency_overrides.clear()
