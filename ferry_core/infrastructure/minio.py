"""
MinIO client connector for ferry.

This module keeps one MinIO client per endpoint/credential pair so that
every S3-compatible upload backend pointing at the same server shares the
underlying connection pool.
"""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger
from minio import Minio

from ferry_core.config import settings


class MinioClientConnector:
    """
    Cached connector for MinIO object storage.

    Usage:
        client = MinioClientConnector.get_instance()
        client = MinioClientConnector.get_instance({"endpoint": "s3.example.com"})
    """

    _instances: dict[tuple[str, str, bool], Minio] = {}
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls, options: dict[str, Any] | None = None) -> Minio:
        """
        Get or create the MinIO client for the given connection options.

        Args:
            options: Optional overrides for endpoint, access_key, secret_key,
                secure and region. Missing values come from settings.

        Returns:
            Minio: The MinIO client instance.
        """
        options = options or {}
        endpoint = options.get("endpoint", settings.MINIO_ENDPOINT)
        access_key = options.get("access_key", settings.MINIO_ACCESS_KEY)
        secret_key = options.get("secret_key", settings.MINIO_SECRET_KEY)
        secure = bool(options.get("secure", settings.MINIO_SECURE))
        key = (endpoint, access_key, secure)

        with cls._lock:
            client = cls._instances.get(key)
            if client is None:
                try:
                    client = Minio(
                        endpoint=endpoint,
                        access_key=access_key,
                        secret_key=secret_key,
                        secure=secure,
                        region=options.get("region"),
                    )
                    logger.info(f"Connected to MinIO at '{endpoint}'")
                except Exception as e:
                    logger.error(f"Failed to connect to MinIO at '{endpoint}': {e}")
                    raise
                cls._instances[key] = client

        return client

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients (for testing)."""
        with cls._lock:
            cls._instances = {}


def get_minio_client(options: dict[str, Any] | None = None) -> Minio:
    """
    Convenience function to get the MinIO client.

    Returns:
        Minio: The MinIO client instance.
    """
    return MinioClientConnector.get_instance(options)
