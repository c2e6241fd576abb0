"""
Pydantic schemas for the upload API.
"""

from pydantic import BaseModel

from .descriptor import FileDescriptor


class FileRecord(BaseModel):
    """One stored file, as returned to the client."""

    type: str
    name: str
    filename: str
    extension: str
    size: int
    path: str

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "FileRecord":
        return cls(**descriptor.to_record())


class UploadedFilesResponse(BaseModel):
    """Response model for AJAX uploads."""

    files: dict[str, list[FileRecord]] = {}


class UploadHealth(BaseModel):
    status: str
    module: str
    enabled: bool
    storage: str
