"""
S3-compatible storage backend built on MinIO.

Registered as "s3" and "minio". The configured root is used as a key prefix
inside the bucket; directories are represented by zero-length marker objects
ending with a slash, the same convention S3 consoles use.
"""

from __future__ import annotations

import io
from typing import Any

from loguru import logger
from minio.error import MinioException

from ferry_core.config import settings
from ferry_core.domain.exceptions import (
    StorageConflictError,
    StorageError,
    StorageNotFoundError,
)
from ferry_core.infrastructure.minio import get_minio_client

from ..storage_protocol import VISIBILITY_PUBLIC, normalize_path

_MISSING_CODES = {"NoSuchKey", "NoSuchObject", "NotFound", "NoSuchBucket"}


def _is_missing(error: Exception) -> bool:
    return getattr(error, "code", None) in _MISSING_CODES


class MinIOStorage:
    """
    MinIO-based storage for production deployments.

    Options:
        bucket: Target bucket (defaults to MINIO_BUCKET).
        endpoint, access_key, secret_key, secure, region: Connection overrides.
        visibility: Visibility reported for existing objects ("public").
        content_type: Content type for stored objects.

    Usage:
        storage = MinIOStorage("uploads", {"bucket": "media"})
        storage.write("3f2a9c/avatar.png", content)
    """

    def __init__(self, root_dir: str = "", options: dict[str, Any] | None = None):
        options = dict(options or {})
        self._client = get_minio_client(options)
        self.bucket = options.get("bucket", settings.MINIO_BUCKET)
        self.prefix = root_dir.strip("/")
        self.default_visibility = options.get("visibility", VISIBILITY_PUBLIC)
        self.content_type = options.get("content_type", "application/octet-stream")

        self.ensure_bucket_exists(self.bucket)

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """Create bucket if it doesn't exist."""
        try:
            if not self._client.bucket_exists(bucket_name):
                self._client.make_bucket(bucket_name)
                logger.info(f"Created MinIO bucket '{bucket_name}'")
        except MinioException as e:
            raise StorageError(f"Could not ensure bucket '{bucket_name}' exists: {e}") from e

    def _key(self, path: str) -> str:
        path = normalize_path(path)
        return f"{self.prefix}/{path}" if self.prefix else path

    def _stat(self, key: str) -> bool:
        try:
            self._client.stat_object(self.bucket, key)
            return True
        except MinioException as e:
            if _is_missing(e):
                return False
            raise StorageError(f"Unable to stat {self.bucket}/{key}: {e}") from e

    def create_directory(self, path: str) -> None:
        key = self._key(path) + "/"
        try:
            self._client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=io.BytesIO(b""),
                length=0,
            )
        except MinioException as e:
            raise StorageError(f"Unable to create directory {key}: {e}") from e
        logger.debug(f"Created directory marker {self.bucket}/{key}")

    def visibility(self, path: str) -> str:
        key = self._key(path)
        if not (self._stat(key) or self._stat(key + "/")):
            raise StorageNotFoundError(f"File not found: {path}")
        return self.default_visibility

    def file_exists(self, path: str) -> bool:
        return self._stat(self._key(path))

    def write(self, path: str, content: bytes) -> None:
        key = self._key(path)
        if self._stat(key):
            raise StorageConflictError(f"File already exists: {path}")

        logger.info(f"Uploading {len(content)} bytes to {self.bucket}/{key}")
        try:
            self._client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=io.BytesIO(content),
                length=len(content),
                content_type=self.content_type,
            )
        except MinioException as e:
            raise StorageError(f"Unable to write {self.bucket}/{key}: {e}") from e

    def read(self, path: str) -> bytes:
        key = self._key(path)
        try:
            response = self._client.get_object(self.bucket, key)
        except MinioException as e:
            if _is_missing(e):
                raise StorageNotFoundError(f"File not found: {path}") from e
            raise StorageError(f"Unable to read {self.bucket}/{key}: {e}") from e
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def delete(self, path: str) -> None:
        key = self._key(path)
        logger.info(f"Deleting {self.bucket}/{key}")
        try:
            self._client.remove_object(self.bucket, key)
        except MinioException as e:
            raise StorageError(f"Unable to delete {self.bucket}/{key}: {e}") from e
