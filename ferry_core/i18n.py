"""
Message catalogs for user-facing upload errors.

Messages use ``:name`` placeholders, filled from keyword arguments.
Unknown locales fall back to the default locale, unknown keys to the key
itself so a missing translation never hides the failure.
"""

from __future__ import annotations

from typing import Any

from ferry_core.config import settings

CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "errors.upload.failed": "An error occurred while uploading file :name.",
        "errors.upload.access": "Unable to access the upload directory.",
        "errors.upload.dir": "The upload directory is not correctly configured.",
        "errors.upload.adapter": "The upload storage adapter is not registered.",
        "errors.upload.invalid": "The upload reference is invalid.",
        "errors.upload.type": "The file type :type is not allowed.",
        "errors.upload.extension": "The file extension :extension is not allowed.",
        "errors.upload.max-size": "The file size :size exceeds the maximum allowed.",
        "errors.upload.min-size": "The file size :size is below the minimum allowed.",
    },
    "fr": {
        "errors.upload.failed": "Une erreur s'est produite lors du téléversement du fichier :name.",
        "errors.upload.access": "Impossible d'accéder au répertoire de téléversement.",
        "errors.upload.dir": "Le répertoire de téléversement n'est pas correctement configuré.",
        "errors.upload.adapter": "L'adaptateur de stockage n'est pas enregistré.",
        "errors.upload.invalid": "La référence de téléversement est invalide.",
        "errors.upload.type": "Le type de fichier :type n'est pas autorisé.",
        "errors.upload.extension": "L'extension de fichier :extension n'est pas autorisée.",
        "errors.upload.max-size": "La taille du fichier :size dépasse le maximum autorisé.",
        "errors.upload.min-size": "La taille du fichier :size est inférieure au minimum autorisé.",
    },
    "es": {
        "errors.upload.failed": "Se produjo un error al subir el archivo :name.",
        "errors.upload.access": "No se puede acceder al directorio de subida.",
        "errors.upload.dir": "El directorio de subida no está configurado correctamente.",
        "errors.upload.adapter": "El adaptador de almacenamiento no está registrado.",
        "errors.upload.invalid": "La referencia de subida no es válida.",
        "errors.upload.type": "El tipo de archivo :type no está permitido.",
        "errors.upload.extension": "La extensión de archivo :extension no está permitida.",
        "errors.upload.max-size": "El tamaño del archivo :size supera el máximo permitido.",
        "errors.upload.min-size": "El tamaño del archivo :size es inferior al mínimo permitido.",
    },
}


class Translator:
    """
    Looks up upload messages in the bundled catalogs.

    Usage:
        translator = Translator(locale="fr")
        translator.trans("errors.upload.type", type="image/gif")
    """

    def __init__(self, locale: str | None = None, default_locale: str = "en"):
        self.default_locale = default_locale
        self.locale = locale or settings.DEFAULT_LOCALE
        self._catalogs: dict[str, dict[str, str]] = {
            name: dict(messages) for name, messages in CATALOGS.items()
        }

    def load_translations(self, locale: str, messages: dict[str, str]) -> None:
        """Add or override messages for a locale."""
        self._catalogs.setdefault(locale, {}).update(messages)

    def trans(self, key: str, locale: str | None = None, **params: Any) -> str:
        catalog = self._catalogs.get(locale or self.locale) or {}
        message = catalog.get(key)
        if message is None:
            message = self._catalogs.get(self.default_locale, {}).get(key, key)
        # Longest names first so ":max-size" is not clobbered by ":max"
        for name in sorted(params, key=len, reverse=True):
            message = message.replace(f":{name}", str(params[name]))
        return message
