"""
HTML response returned to plain HTTP uploads.

The page is loaded in a hidden frame by the client library, which reads
the ``res`` variable: either the temp-file handle to send back with the
follow-up AJAX call, or the error message.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from fastapi.responses import HTMLResponse

CONTENT_TYPE = "text/html"

_TEMPLATE = """
<!DOCTYPE html>
<html>
<body>
<h1>HTTP Upload</h1>
</body>
<script>
    res = {result};
    // Debug messages {messages}
</script>
</html>"""


def _js_string(message: str) -> str:
    escaped = message.replace("\\", "\\\\").replace('"', '\\"').replace("'", "\\'")
    return escaped.replace("\n", "\\n").replace("</", "<\\/")


@dataclass
class UploadResponse:
    """Outcome of a plain HTTP upload: a handle on success, a message on failure."""

    handle: str = ""
    error: str = ""
    debug_messages: list[str] = field(default_factory=list)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE

    @property
    def status_code(self) -> int:
        return 200 if self.handle else 500

    @property
    def result(self) -> dict[str, str]:
        if self.handle:
            return {"code": "success", "upl": self.handle}
        return {"code": "error", "msg": self.error}

    def add_debug_message(self, message: str) -> None:
        self.debug_messages.append(message)

    def render(self) -> str:
        messages = "".join(
            f'\n\tconsole.log("{_js_string(message)}");' for message in self.debug_messages
        )
        # Escape "</" so a message cannot close the script element
        result = json.dumps(self.result).replace("</", "<\\/")
        return _TEMPLATE.format(result=result, messages=messages)

    def to_http_response(self) -> HTMLResponse:
        return HTMLResponse(content=self.render(), status_code=self.status_code)
