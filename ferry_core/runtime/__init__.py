"""
Service runtime layer for ferry.

This package provides the shared error model:
- ServiceError: structured API errors with a retry hint
- UploadError and its kinds: the request-level upload failures
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    InvalidReferenceError,
    ServiceError,
    StorageAccessError,
    UploadError,
    UploadTransportError,
    ValidationError,
)

__all__ = [
    "ErrorCode",
    "ServiceError",
    "UploadError",
    "ConfigurationError",
    "StorageAccessError",
    "UploadTransportError",
    "ValidationError",
    "InvalidReferenceError",
]
