"""
Storage resolution for upload fields.

Maps a field name to a concrete StorageBackend, using the
``upload.default.*`` options overridden by ``upload.files.<field>.*``.
"""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger

from ferry_core.config import UploadConfig
from ferry_core.i18n import Translator
from ferry_core.runtime.errors import ConfigurationError

from .backends import InMemoryStorage, LocalStorage, MinIOStorage
from .storage_protocol import BackendFactory, StorageBackend


def _local_factory(root_dir: str, options: Any) -> StorageBackend:
    return LocalStorage(root_dir, options or None)


def _memory_factory(root_dir: str, options: Any) -> StorageBackend:
    return InMemoryStorage(root_dir, options or None)


def _minio_factory(root_dir: str, options: Any) -> StorageBackend:
    return MinIOStorage(root_dir, options or None)


class StorageResolver:
    """
    Resolves and caches the storage backend of each upload field.

    Backends are built once per field name and reused for the lifetime of the
    resolver; in-memory backends in particular must not be rebuilt per call.
    Cache population is serialized so that concurrent requests never open the
    same remote session twice.

    Usage:
        resolver = StorageResolver(config, translator)
        resolver.register_default_backends()
        backend = resolver.resolve("avatar")
    """

    def __init__(self, config: UploadConfig, translator: Translator):
        self.config = config
        self.translator = translator
        self._factories: dict[str, BackendFactory] = {}
        self._backends: dict[str, StorageBackend] = {}
        self._lock = threading.Lock()

    def register_backend(self, name: str, factory: BackendFactory) -> None:
        """Register a backend factory; the last registration for a name wins."""
        self._factories[name] = factory

    def register_default_backends(self) -> None:
        self.register_backend("local", _local_factory)
        self.register_backend("memory", _memory_factory)
        self.register_backend("s3", _minio_factory)
        self.register_backend("minio", _minio_factory)

    def has_backend(self, name: str) -> bool:
        return name in self._factories

    def _options_for(self, field: str) -> tuple[str, Any, Any]:
        storage = self.config.get("upload.default.storage", "local")
        root_dir = self.config.get("upload.default.dir", "")
        options = self.config.get("upload.default.options")

        section = f"upload.files.{field}"
        if field and self.config.has_key(section):
            storage = self.config.get(f"{section}.storage", storage)
            root_dir = self.config.get(f"{section}.dir", root_dir)
            options = self.config.get(f"{section}.options", options)
        return storage, root_dir, options

    def resolve(self, field: str = "") -> StorageBackend:
        """
        Get the backend for an upload field.

        Args:
            field: The field name; empty for the default (and temp) backend.

        Returns:
            StorageBackend: The cached or newly built backend.

        Raises:
            ConfigurationError: If the root dir is not a string, the backend
                name is not registered, or the backend cannot be built.
        """
        field = field.strip()
        with self._lock:
            backend = self._backends.get(field)
            if backend is not None:
                return backend

            storage, root_dir, options = self._options_for(field)
            if not isinstance(root_dir, str):
                raise ConfigurationError(
                    self.translator.trans("errors.upload.dir"),
                    message_debug=f"Upload dir for field '{field}' is {type(root_dir).__name__}",
                )
            factory = self._factories.get(storage)
            if factory is None:
                raise ConfigurationError(
                    self.translator.trans("errors.upload.adapter"),
                    message_debug=f"No storage adapter registered as '{storage}'",
                )

            try:
                backend = factory(root_dir, options)
            except Exception as e:
                logger.error(f"Failed to build '{storage}' storage for field '{field}': {e}")
                raise ConfigurationError(
                    self.translator.trans("errors.upload.dir"),
                    message_debug=str(e),
                    cause=e,
                ) from e

            self._backends[field] = backend
            logger.debug(f"Resolved '{storage}' storage at '{root_dir}' for field '{field}'")
            return backend

    def reset(self) -> None:
        """Forget cached backends (for config reloads and tests)."""
        with self._lock:
            self._backends = {}
