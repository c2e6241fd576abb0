"""
AJAX upload subsystem: validation, pluggable storage and deferred handoff.
"""

from .coordinator import CleanupOutcome, FieldState, UploadCoordinator
from .descriptor import FileDescriptor
from .gate import UPLOAD_REFERENCE_KEY, RequestGate
from .resolver import StorageResolver
from .response import UploadResponse
from .transport import TransportErrorCode, TransportFile, UploadRequest
from .validator import ValidationResult, Validator

__all__ = [
    "CleanupOutcome",
    "FieldState",
    "FileDescriptor",
    "RequestGate",
    "StorageResolver",
    "TransportErrorCode",
    "TransportFile",
    "UPLOAD_REFERENCE_KEY",
    "UploadCoordinator",
    "UploadRequest",
    "UploadResponse",
    "ValidationResult",
    "Validator",
]
