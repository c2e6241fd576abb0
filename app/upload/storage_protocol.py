"""
Storage backend protocol for uploaded files.

This module defines the interface every upload backend implements,
enabling different implementations (local filesystem, in-memory, MinIO/S3)
to be used interchangeably, plus the path normalization they share.
"""

from __future__ import annotations

import posixpath
from typing import Any, Callable, Protocol, runtime_checkable

from ferry_core.domain.exceptions import StorageError

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"


@runtime_checkable
class StorageBackend(Protocol):
    """
    Abstract storage interface for uploaded files.

    Paths are relative to the backend root and use forward slashes.
    Implementations raise ferry_core.domain.exceptions.StorageError
    (or a subclass) on failure.
    """

    def create_directory(self, path: str) -> None:
        """Create a directory (and its parents) under the root."""
        ...

    def visibility(self, path: str) -> str:
        """
        Return VISIBILITY_PUBLIC or VISIBILITY_PRIVATE for an existing path.

        Raises:
            StorageNotFoundError: If nothing exists at path.
        """
        ...

    def file_exists(self, path: str) -> bool:
        """Check whether a file exists at path."""
        ...

    def write(self, path: str, content: bytes) -> None:
        """
        Store content at path.

        Raises:
            StorageConflictError: If path already holds content.
        """
        ...

    def read(self, path: str) -> bytes:
        """Return the content stored at path."""
        ...

    def delete(self, path: str) -> None:
        """Delete the file at path."""
        ...


# (root_dir, options) -> backend
BackendFactory = Callable[[str, Any], StorageBackend]


def normalize_path(path: str) -> str:
    """
    Normalize a backend-relative path.

    Leading and trailing slashes are dropped and ``.`` segments collapsed.
    Paths escaping the root are rejected.

    Raises:
        StorageError: If the path is empty or points outside the root.
    """
    cleaned = posixpath.normpath(path.replace("\\", "/").strip("/")) if path else ""
    if cleaned in ("", "."):
        raise StorageError("Empty storage path")
    if cleaned == ".." or cleaned.startswith("../"):
        raise StorageError(f"Path outside of the storage root: {path}")
    return cleaned
