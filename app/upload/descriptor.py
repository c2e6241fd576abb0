"""
Descriptors of stored uploads.

A FileDescriptor identifies one uploaded file: what the client declared,
where the bytes live, and which backend holds them. It is built either from
a live transport part (before the content is written) or from a temp-file
record (after a previous request wrote it).
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any

from .storage_protocol import StorageBackend
from .transport import TransportFile

RECORD_KEYS = ("type", "name", "filename", "extension", "size", "path")


def split_filename(filename: str) -> tuple[str, str]:
    """
    Split a client filename into (stem, extension).

    Directory parts some browsers send are dropped; the extension is
    whatever follows the last dot, lower-cased. A leading dot counts too,
    so ".htaccess" has an empty stem and the extension "htaccess" and is
    checked against extension allow-lists.
    """
    basename = posixpath.basename(filename.replace("\\", "/"))
    stem, dot, ext = basename.rpartition(".")
    if not dot:
        return basename, ""
    return stem, ext.lower()


@dataclass(frozen=True)
class FileDescriptor:
    """Identity of one stored upload."""

    media_type: str
    name: str
    filename: str
    extension: str
    size: int
    path: str
    backend: StorageBackend | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_transport(
        cls,
        backend: StorageBackend,
        upload_dir: str,
        name: str,
        transport_file: TransportFile,
    ) -> "FileDescriptor":
        """
        Describe a transport part that is about to be stored.

        Args:
            backend: The backend that will hold the content.
            upload_dir: The random directory created for the field.
            name: The sanitized name, without extension.
            transport_file: The uploaded part.
        """
        _, extension = split_filename(transport_file.client_filename)
        basename = f"{name}.{extension}" if extension else name
        return cls(
            media_type=transport_file.client_media_type,
            name=name,
            filename=transport_file.client_filename,
            extension=extension,
            size=transport_file.size,
            path=f"{upload_dir.rstrip('/')}/{basename}",
            backend=backend,
        )

    @classmethod
    def from_record(cls, backend: StorageBackend, record: dict[str, Any]) -> "FileDescriptor":
        """
        Rebuild a descriptor from a temp-file record.

        Raises:
            KeyError: If a record key is missing.
            ValueError: If the size is not an integer.
        """
        return cls(
            media_type=str(record["type"]),
            name=str(record["name"]),
            filename=str(record["filename"]),
            extension=str(record["extension"]),
            size=int(record["size"]),
            path=str(record["path"]),
            backend=backend,
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "type": self.media_type,
            "name": self.name,
            "filename": self.filename,
            "extension": self.extension,
            "size": self.size,
            "path": self.path,
        }

    def read(self) -> bytes:
        """Read the stored content back from the backend."""
        if self.backend is None:
            raise RuntimeError(f"No storage backend bound to {self.path}")
        return self.backend.read(self.path)
