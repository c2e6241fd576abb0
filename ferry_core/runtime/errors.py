"""
Error model for upload requests.

ServiceError carries the structured fields every API error exposes (code,
safe message, retry hint, debug id). Upload failures all derive from
UploadError, the single request-level category seen by RPC handlers;
subclasses tell the failure kinds apart and pick the HTTP status.
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """Service error with a safe message and retry classification.

    Attributes:
        code: Machine-readable error code (e.g., "UPLOAD_ACCESS").
        message_safe: Message safe for logs and user display.
        message_debug: Optional backend detail, never sent to clients.
        retryable: Whether the operation can be retried.
        cause: Optional underlying exception.
        debug_id: Unique identifier for support correlation.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"retryable={self.retryable}, "
            f"debug_id={self.debug_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to an API-safe dictionary (no debug message)."""
        return {
            "code": self.code,
            "message": self.message_safe,
            "debug_id": self.debug_id,
        }


class ErrorCode:
    """Error codes returned in API error bodies."""

    UPLOAD_CONFIG = "UPLOAD_CONFIG"
    UPLOAD_ACCESS = "UPLOAD_ACCESS"
    UPLOAD_TRANSPORT = "UPLOAD_TRANSPORT"
    UPLOAD_INVALID = "UPLOAD_INVALID"
    UPLOAD_REFERENCE = "UPLOAD_REFERENCE"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class UploadError(ServiceError):
    """Request-level failure while processing uploaded files.

    RPC handlers only need to catch this class; the subclasses carry the
    failure kind for logging and HTTP status mapping.
    """

    default_code = ErrorCode.INTERNAL_ERROR
    default_retryable = False

    def __init__(
        self,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        code: str | None = None,
    ):
        super().__init__(
            code=code or self.default_code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=self.default_retryable,
            cause=cause,
        )


class ConfigurationError(UploadError):
    """Invalid or missing storage root, or an unregistered backend name."""

    default_code = ErrorCode.UPLOAD_CONFIG


class StorageAccessError(UploadError):
    """Directory creation, visibility check, read, write or delete failed."""

    default_code = ErrorCode.UPLOAD_ACCESS
    default_retryable = True


class UploadTransportError(UploadError):
    """The transport layer reported an error for an uploaded part."""

    default_code = ErrorCode.UPLOAD_TRANSPORT

    def __init__(
        self,
        message_safe: str,
        transport_code: int,
        message_debug: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message_safe, message_debug=message_debug, cause=cause)
        self.transport_code = transport_code


class ValidationError(UploadError):
    """An uploaded file broke a type, extension or size rule."""

    default_code = ErrorCode.UPLOAD_INVALID

    @property
    def reason(self) -> str:
        return self.message_safe


class InvalidReferenceError(UploadError):
    """A temp-file handle failed the safety check."""

    default_code = ErrorCode.UPLOAD_REFERENCE
