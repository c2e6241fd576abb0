"""
Unit tests for the plain HTTP upload response page.
"""

import json
import re

from app.upload.response import UploadResponse


def extract_result(html):
    match = re.search(r"res = (.*);\n", html)
    return json.loads(match.group(1))


class TestUploadResponse:
    """Tests for the two result shapes."""

    def test_success_page(self):
        response = UploadResponse(handle="3f2a9c0011223344")

        assert response.status_code == 200
        assert response.content_type == "text/html"
        assert extract_result(response.render()) == {"code": "success", "upl": "3f2a9c0011223344"}

    def test_error_page(self):
        response = UploadResponse(error="The file type image/gif is not allowed.")

        assert response.status_code == 500
        assert extract_result(response.render()) == {
            "code": "error",
            "msg": "The file type image/gif is not allowed.",
        }

    def test_debug_messages_are_logged_to_console(self):
        response = UploadResponse(error="Failed")
        response.add_debug_message('Rule "max-size" rejected a.png')

        assert 'console.log("Rule \\"max-size\\" rejected a.png");' in response.render()

    def test_message_cannot_close_script(self):
        response = UploadResponse(error="</script><script>alert(1)</script>")

        html = response.render()

        assert html.count("</script>") == 1
        assert extract_result(html)["msg"] == "</script><script>alert(1)</script>"

    def test_to_http_response(self):
        http_response = UploadResponse(handle="abc123").to_http_response()

        assert http_response.status_code == 200
        assert http_response.media_type == "text/html"
        assert b'"upl": "abc123"' in http_response.body
