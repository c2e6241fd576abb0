"""
Factory for creating upload components.

The option tree and the storage resolver are process-wide (the resolver
caches one backend per field); coordinators and gates hold per-request
state and are built fresh for every request.
"""

from __future__ import annotations

import threading

from loguru import logger

from ferry_core.config import UploadConfig, settings
from ferry_core.i18n import Translator

from .coordinator import NameSanitizer, UploadCoordinator
from .gate import RequestGate
from .names import NameGenerator
from .resolver import StorageResolver
from .validator import Validator

_config: UploadConfig | None = None
_resolver: StorageResolver | None = None
_lock = threading.Lock()


def get_upload_config() -> UploadConfig:
    """Get the upload option tree, loading it on first use."""
    global _config
    with _lock:
        if _config is None:
            _config = UploadConfig.from_settings(settings)
        return _config


def get_translator(locale: str | None = None) -> Translator:
    return Translator(locale=locale, default_locale=settings.DEFAULT_LOCALE)


def get_resolver() -> StorageResolver:
    """Get the shared storage resolver with the built-in backends registered."""
    global _resolver
    config = get_upload_config()
    with _lock:
        if _resolver is None:
            _resolver = StorageResolver(config, get_translator())
            _resolver.register_default_backends()
            logger.info(
                f"Upload storage resolver ready (default storage "
                f"'{config.get_string('upload.default.storage')}')"
            )
        return _resolver


def is_upload_enabled() -> bool:
    return get_upload_config().get_bool("core.upload.enabled", True)


def build_gate(
    resolver: StorageResolver | None = None,
    translator: Translator | None = None,
    name_generator: NameGenerator | None = None,
    name_sanitizer: NameSanitizer | None = None,
    upload_field_id: str = "",
) -> RequestGate:
    """
    Create a request gate and its coordinator for one request.

    Args:
        resolver: Storage resolver; the shared one when omitted.
        translator: Message translator; the default locale when omitted.
        name_generator: Random name source; hex names when omitted.
        name_sanitizer: Optional callable rewriting uploaded file names.
        upload_field_id: Identifier passed to the sanitizer.
    """
    resolver = resolver or get_resolver()
    translator = translator or get_translator()
    coordinator = UploadCoordinator(
        resolver=resolver,
        validator=Validator(resolver.config, translator),
        translator=translator,
        name_generator=name_generator,
        name_sanitizer=name_sanitizer,
        upload_field_id=upload_field_id,
    )
    return RequestGate(coordinator, debug=settings.LOG_LEVEL.upper() == "DEBUG")


def reset() -> None:
    """Drop the shared config and resolver (for config reloads and tests)."""
    global _config, _resolver
    with _lock:
        _config = None
        _resolver = None
