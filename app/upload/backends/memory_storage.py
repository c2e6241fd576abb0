"""
In-memory storage backend.

Keeps uploads in a dict, for tests and single-process development setups.
The resolver caches backend instances, so content survives between the two
requests of a deferred upload as long as the process lives.
"""

from __future__ import annotations

import threading
from typing import Any

from ferry_core.domain.exceptions import StorageConflictError, StorageNotFoundError

from ..storage_protocol import VISIBILITY_PRIVATE, VISIBILITY_PUBLIC, normalize_path


class InMemoryStorage:
    """
    Dict-backed storage implementing the StorageBackend protocol.

    Options:
        visibility: Visibility reported for every path ("public" by default).
    """

    def __init__(self, root_dir: str = "", options: dict[str, Any] | None = None):
        options = options or {}
        self.root_dir = root_dir
        self.default_visibility = options.get("visibility", VISIBILITY_PUBLIC)
        self._files: dict[str, bytes] = {}
        self._directories: set[str] = set()
        self._lock = threading.Lock()

    def create_directory(self, path: str) -> None:
        path = normalize_path(path)
        with self._lock:
            parts = path.split("/")
            for i in range(1, len(parts) + 1):
                self._directories.add("/".join(parts[:i]))

    def visibility(self, path: str) -> str:
        path = normalize_path(path)
        with self._lock:
            if path not in self._files and path not in self._directories:
                raise StorageNotFoundError(f"File not found: {path}")
        return VISIBILITY_PUBLIC if self.default_visibility == VISIBILITY_PUBLIC else VISIBILITY_PRIVATE

    def file_exists(self, path: str) -> bool:
        with self._lock:
            return normalize_path(path) in self._files

    def write(self, path: str, content: bytes) -> None:
        path = normalize_path(path)
        with self._lock:
            if path in self._files:
                raise StorageConflictError(f"File already exists: {path}")
            self._files[path] = bytes(content)
            parent = path.rpartition("/")[0]
            while parent:
                self._directories.add(parent)
                parent = parent.rpartition("/")[0]

    def read(self, path: str) -> bytes:
        path = normalize_path(path)
        with self._lock:
            try:
                return self._files[path]
            except KeyError as e:
                raise StorageNotFoundError(f"File not found: {path}") from e

    def delete(self, path: str) -> None:
        path = normalize_path(path)
        with self._lock:
            if self._files.pop(path, None) is None:
                raise StorageNotFoundError(f"File not found for deletion: {path}")

    def list_files(self) -> list[str]:
        with self._lock:
            return sorted(self._files)
