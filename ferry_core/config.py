"""
Unified configuration for ferry services.

This module provides two layers of configuration:
- Settings: process-level values loaded from environment variables / .env
- UploadConfig: the dotted-path option tree read by the upload subsystem
  (``upload.default.*`` and ``upload.files.<field>.*``)

The upload option tree usually lives in a YAML file pointed to by
UPLOAD_CONFIG_FILE; environment values fill in the defaults when it is absent.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Mapping

import yaml
from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Process-wide settings for ferry.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "ferry"

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8081

    # Upload pipeline (core.upload.enabled)
    UPLOAD_ENABLED: bool = True
    UPLOAD_CONFIG_FILE: str = ""

    # Fallbacks used when the YAML file does not set upload.default.*
    UPLOAD_STORAGE: str = "local"
    UPLOAD_DIR: str = "/tmp/ferry-uploads"

    # MinIO / S3-compatible storage
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_BUCKET: str = "uploads"
    MINIO_SECURE: bool = False

    # Logging / messages
    LOG_LEVEL: str = "INFO"
    DEFAULT_LOCALE: str = "en"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore


_MISSING = object()


class UploadConfig:
    """
    Read-only view over a nested option tree addressed with dotted paths.

    Usage:
        config = UploadConfig({"upload": {"default": {"max-size": 2500}}})
        config.get_int("upload.default.max-size")          # 2500
        config.has_key("upload.files.image")               # False
    """

    def __init__(self, options: Mapping[str, Any] | None = None):
        self._options: dict[str, Any] = copy.deepcopy(dict(options or {}))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "UploadConfig":
        """
        Load the option tree from a YAML file.

        A missing file yields an empty configuration, which is permissive:
        no upload restriction applies and the local backend is used.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Upload config file not found: {path}")
            return cls()
        with path.open(encoding="utf-8") as fh:
            return cls(yaml.safe_load(fh) or {})

    @classmethod
    def from_settings(cls, app_settings: Settings | None = None) -> "UploadConfig":
        """Build the option tree from the YAML file and env fallbacks."""
        app_settings = app_settings or settings
        config = cls.from_yaml(app_settings.UPLOAD_CONFIG_FILE) if app_settings.UPLOAD_CONFIG_FILE else cls()

        if not config.has_key("upload.default.storage"):
            config.set("upload.default.storage", app_settings.UPLOAD_STORAGE)
        if not config.has_key("upload.default.dir"):
            config.set("upload.default.dir", app_settings.UPLOAD_DIR)
        if not config.has_key("core.upload.enabled"):
            config.set("core.upload.enabled", app_settings.UPLOAD_ENABLED)
        return config

    def _lookup(self, path: str) -> Any:
        node: Any = self._options
        for part in path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def has_key(self, path: str) -> bool:
        return self._lookup(path) is not _MISSING

    def get(self, path: str, default: Any = None) -> Any:
        value = self._lookup(path)
        return default if value is _MISSING else value

    def get_string(self, path: str, default: str = "") -> str:
        value = self.get(path, default)
        return value if isinstance(value, str) else default

    def get_string_list(self, path: str) -> list[str] | None:
        """Return the list at path, or None when unset or not a list."""
        value = self.get(path)
        if not isinstance(value, (list, tuple)):
            return None
        return [str(item) for item in value]

    def get_int(self, path: str, default: int = 0) -> int:
        value = self.get(path, default)
        if isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, path: str, default: bool = False) -> bool:
        value = self.get(path, default)
        return bool(value)

    def set(self, path: str, value: Any) -> None:
        """Set a value, creating intermediate sections as needed."""
        parts = path.split(".")
        node = self._options
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._options)
