"""
Standard exceptions for ferry storage backends.

Backends raise these instead of their native errors (OSError, S3Error, ...)
so the upload layer can tell backend failures apart from programming errors.
"""


class FerryError(Exception):
    """Base exception for all ferry errors."""
    pass


class StorageError(FerryError):
    """Error during storage backend operations."""
    pass


class StorageNotFoundError(StorageError):
    """The requested path does not exist in the backend."""
    pass


class StorageConflictError(StorageError):
    """A write targeted a path that already holds content."""
    pass
