"""
Local filesystem storage backend.

This implementation stores uploads under a root directory on the local
filesystem. It is the backend registered as "local" by default.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Any

from loguru import logger

from ferry_core.domain.exceptions import (
    StorageConflictError,
    StorageError,
    StorageNotFoundError,
)

from ..storage_protocol import VISIBILITY_PRIVATE, VISIBILITY_PUBLIC, normalize_path


class LocalStorage:
    """
    File-system based storage for uploaded files.

    The root directory must already exist; it is never created implicitly,
    so a mistyped root surfaces as an access error instead of a stray tree.
    Directories are created with ``directory_mode`` (0o755) and files with
    ``file_mode`` (0o644); a path is public when it is world-readable.

    Usage:
        storage = LocalStorage("/var/lib/ferry/uploads")
        storage.create_directory("3f2a9c")
        storage.write("3f2a9c/avatar.png", content)
    """

    def __init__(self, root_dir: str, options: dict[str, Any] | None = None):
        """
        Initialize local storage.

        Args:
            root_dir: Root directory for all stored files.
            options: Optional ``directory_mode`` / ``file_mode`` overrides.
        """
        if not root_dir:
            raise ValueError("LocalStorage requires a root directory")
        options = options or {}
        self.base_path = Path(root_dir)
        self.directory_mode = int(options.get("directory_mode", 0o755))
        self.file_mode = int(options.get("file_mode", 0o644))
        logger.info(f"LocalStorage initialized at {self.base_path}")

    def _target(self, path: str) -> Path:
        return self.base_path / normalize_path(path)

    def _ensure_root(self) -> None:
        if not self.base_path.is_dir():
            raise StorageError(f"Storage root does not exist: {self.base_path}")

    def create_directory(self, path: str) -> None:
        self._ensure_root()
        target = self._target(path)
        try:
            target.mkdir(mode=self.directory_mode, parents=True, exist_ok=True)
            os.chmod(target, self.directory_mode)
        except OSError as e:
            raise StorageError(f"Unable to create directory {path}: {e}") from e
        logger.debug(f"Created directory {target}")

    def visibility(self, path: str) -> str:
        target = self._target(path)
        try:
            mode = target.stat().st_mode
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {path}") from e
        except OSError as e:
            raise StorageError(f"Unable to read visibility of {path}: {e}") from e
        return VISIBILITY_PUBLIC if stat.S_IMODE(mode) & stat.S_IROTH else VISIBILITY_PRIVATE

    def file_exists(self, path: str) -> bool:
        return self._target(path).is_file()

    def write(self, path: str, content: bytes) -> None:
        """
        Write content to a new file.

        Args:
            path: Backend-relative path; parent directories are created.
            content: The file content as bytes.

        Raises:
            StorageConflictError: If the file already exists.
            StorageError: On any filesystem failure.
        """
        self._ensure_root()
        target = self._target(path)
        try:
            target.parent.mkdir(mode=self.directory_mode, parents=True, exist_ok=True)
            # "xb" refuses to overwrite stored content
            with open(target, "xb") as fh:
                fh.write(content)
            os.chmod(target, self.file_mode)
        except FileExistsError as e:
            raise StorageConflictError(f"File already exists: {path}") from e
        except OSError as e:
            raise StorageError(f"Unable to write {path}: {e}") from e
        logger.info(f"Stored {len(content)} bytes at {path}")

    def read(self, path: str) -> bytes:
        """
        Read content from the local filesystem.

        Raises:
            StorageNotFoundError: If the file doesn't exist.
        """
        target = self._target(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {path}") from e
        except OSError as e:
            raise StorageError(f"Unable to read {path}: {e}") from e

    def delete(self, path: str) -> None:
        target = self._target(path)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found for deletion: {path}") from e
        except OSError as e:
            raise StorageError(f"Unable to delete {path}: {e}") from e
        logger.info(f"Deleted {path}")
