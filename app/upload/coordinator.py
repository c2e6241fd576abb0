"""
Upload coordination: from transport parts to stored, described files.

The coordinator drives one request's uploads through these steps per field:
1. Resolve the field's backend and create a random upload directory
2. Check each part (transport error, sanitized name, validation rules)
3. Copy every accepted part into its backend, after all fields passed

It also implements the deferred handoff used by plain HTTP uploads: the
descriptors are saved to ``tmp/<handle>.json`` on the default backend and
read back (then deleted) by the follow-up AJAX request.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loguru import logger

from ferry_core.domain.exceptions import StorageError
from ferry_core.i18n import Translator
from ferry_core.runtime.errors import (
    InvalidReferenceError,
    StorageAccessError,
    UploadTransportError,
)

from .descriptor import FileDescriptor, split_filename
from .names import RANDOM_NAME_LENGTH, HexNameGenerator, NameGenerator
from .resolver import StorageResolver
from .storage_protocol import VISIBILITY_PUBLIC, StorageBackend
from .transport import TransportErrorCode, TransportFile, UploadRequest
from .validator import Validator

TEMP_DIR = "tmp"

# (name, field, upload_field_id) -> name
NameSanitizer = Callable[[str, str, str], str]

FilesByField = dict[str, list[FileDescriptor]]


class FieldState(str, Enum):
    """Progress of one field through a request."""

    PENDING = "pending"
    DIRECTORY_ENSURED = "directory_ensured"
    FILES_VALIDATED = "files_validated"
    CONTENT_WRITTEN = "content_written"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CleanupOutcome:
    """Result of deleting a temp descriptor file after it was read."""

    path: str
    deleted: bool
    error: str | None = None


class UploadCoordinator:
    """
    Validates and stores the files of one request.

    A coordinator keeps per-request state (the parts waiting to be copied,
    the field states), so each request gets its own instance. The resolver
    it receives is shared across requests.

    Usage:
        coordinator = UploadCoordinator(resolver, validator, translator)
        files = coordinator.read_from_http_data(upload_request)
        handle = coordinator.save_to_temp_file(files)
        same_files = coordinator.read_from_temp_file(handle)
    """

    def __init__(
        self,
        resolver: StorageResolver,
        validator: Validator,
        translator: Translator,
        name_generator: NameGenerator | None = None,
        name_sanitizer: NameSanitizer | None = None,
        upload_field_id: str = "",
    ):
        self.resolver = resolver
        self.validator = validator
        self.translator = translator
        self.name_generator = name_generator or HexNameGenerator()
        self.name_sanitizer = name_sanitizer
        self.upload_field_id = upload_field_id

        self.field_states: dict[str, FieldState] = {}
        self.last_cleanup: CleanupOutcome | None = None
        self._pending_copies: list[tuple[TransportFile, FileDescriptor, str]] = []

    def set_name_sanitizer(self, sanitizer: NameSanitizer | None) -> None:
        self.name_sanitizer = sanitizer

    def random_name(self) -> str:
        return self.name_generator.random(RANDOM_NAME_LENGTH)

    def _access_error(self, message_debug: str, cause: Exception | None = None) -> StorageAccessError:
        return StorageAccessError(
            self.translator.trans("errors.upload.access"),
            message_debug=message_debug,
            cause=cause,
        )

    def _set_state(self, field: str, state: FieldState) -> None:
        self.field_states[field] = state
        logger.debug(f"Upload field '{field}' -> {state.value}")

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def ensure_upload_directory(self, backend: StorageBackend, directory: str) -> str:
        """
        Create a directory and check that it is usable.

        Args:
            backend: The backend to create the directory in.
            directory: Backend-relative directory name.

        Returns:
            str: The directory name.

        Raises:
            StorageAccessError: If creation fails or the directory is not public.
        """
        try:
            backend.create_directory(directory)
            visibility = backend.visibility(directory)
        except StorageError as e:
            logger.error(f"Unable to create upload directory '{directory}': {e}")
            raise self._access_error(str(e), cause=e) from e

        if visibility != VISIBILITY_PUBLIC:
            logger.error(f"Upload directory '{directory}' is not public ({visibility})")
            raise self._access_error(f"Directory '{directory}' visibility is {visibility}")
        return directory

    def _upload_dir(self, field: str) -> tuple[StorageBackend, str]:
        backend = self.resolver.resolve(field)
        return backend, self.ensure_upload_directory(backend, self.random_name())

    def _temp_dir(self) -> tuple[StorageBackend, str]:
        backend = self.resolver.resolve()
        return backend, self.ensure_upload_directory(backend, TEMP_DIR)

    # ------------------------------------------------------------------
    # Direct uploads
    # ------------------------------------------------------------------

    def prepare_file(
        self,
        backend: StorageBackend,
        upload_dir: str,
        field: str,
        transport_file: TransportFile,
    ) -> FileDescriptor:
        """
        Check one uploaded part and queue it for copying.

        A name already queued for the same directory becomes
        ``<name>_1``, ``<name>_2`` and so on.

        Raises:
            UploadTransportError: If the transport reported an error.
            ValidationError: If a validation rule rejects the file.
        """
        if transport_file.error != TransportErrorCode.OK:
            code = int(transport_file.error)
            try:
                label = TransportErrorCode(code).name
            except ValueError:
                label = "UNKNOWN"
            logger.warning(
                f"Transport error {label} ({code}) on '{transport_file.client_filename}' "
                f"in field '{field}'"
            )
            raise UploadTransportError(
                self.translator.trans("errors.upload.failed", name=field),
                transport_code=code,
                message_debug=f"Transport error {label} in field '{field}'",
            )

        name, _ = split_filename(transport_file.client_filename)
        if self.name_sanitizer is not None:
            name = str(self.name_sanitizer(name, field, self.upload_field_id))

        descriptor = FileDescriptor.from_transport(backend, upload_dir, name, transport_file)
        # Two parts may share a name; paths already queued get a numeric suffix.
        queued = {d.path for _, d, _ in self._pending_copies if d.backend is backend}
        suffix = 0
        while descriptor.path in queued:
            suffix += 1
            descriptor = FileDescriptor.from_transport(
                backend, upload_dir, f"{name}_{suffix}", transport_file
            )
        self.validator.check(field, descriptor)

        self._pending_copies.append((transport_file, descriptor, field))
        return descriptor

    def read_from_http_data(self, request: UploadRequest) -> FilesByField:
        """
        Validate and store every file uploaded with the request.

        All fields are validated before any content is written, so a
        rejected file leaves nothing behind. A failing copy is not rolled
        back: files copied before it stay in their backend.

        Returns:
            dict: Field name to descriptors, in submission order.

        Raises:
            UploadError: Any of its kinds, on the first failure.
        """
        self._pending_copies = []
        self.field_states = {}
        files: FilesByField = {}

        for field, parts in request.uploaded_files.items():
            self._set_state(field, FieldState.PENDING)
            try:
                backend, upload_dir = self._upload_dir(field)
                self._set_state(field, FieldState.DIRECTORY_ENSURED)
                if not isinstance(parts, (list, tuple)):
                    parts = [parts]
                files[field] = [
                    self.prepare_file(backend, upload_dir, field, part) for part in parts
                ]
                self._set_state(field, FieldState.FILES_VALIDATED)
            except Exception:
                self._set_state(field, FieldState.FAILED)
                raise

        for transport_file, descriptor, field in self._pending_copies:
            try:
                descriptor.backend.write(descriptor.path, transport_file.get_contents())
            except (StorageError, OSError) as e:
                self._set_state(field, FieldState.FAILED)
                logger.error(f"Unable to store '{descriptor.filename}' at '{descriptor.path}': {e}")
                raise self._access_error(str(e), cause=e) from e
        self._pending_copies = []

        for field in files:
            self._set_state(field, FieldState.CONTENT_WRITTEN)
            self._set_state(field, FieldState.DONE)

        logger.info(
            f"Stored {sum(len(v) for v in files.values())} uploaded file(s) in {len(files)} field(s)"
        )
        return files

    # ------------------------------------------------------------------
    # Deferred uploads
    # ------------------------------------------------------------------

    def save_to_temp_file(self, files: FilesByField) -> str:
        """
        Save file descriptors to a temp file on the default backend.

        Returns:
            str: The temp file handle (its name without extension).

        Raises:
            StorageAccessError: If the temp dir or file cannot be written.
        """
        records = {
            field: [descriptor.to_record() for descriptor in descriptors]
            for field, descriptors in files.items()
        }
        backend, temp_dir = self._temp_dir()
        handle = self.random_name()
        path = f"{temp_dir}/{handle}.json"
        try:
            backend.write(path, json.dumps(records).encode("utf-8"))
        except StorageError as e:
            logger.error(f"Unable to write upload temp file '{path}': {e}")
            raise self._access_error(str(e), cause=e) from e

        logger.info(f"Saved upload descriptors to temp file {handle}")
        return handle

    def _temp_file(self, handle: str) -> tuple[StorageBackend, str]:
        if not self.validator.validate_temp_file_name(handle):
            logger.warning(f"Rejected upload temp file reference {handle!r}")
            raise InvalidReferenceError(
                self.translator.trans("errors.upload.invalid"),
                message_debug=f"Unsafe temp file handle {handle!r}",
            )
        backend, temp_dir = self._temp_dir()
        path = f"{temp_dir}/{handle}.json"
        try:
            visibility = backend.visibility(path)
        except StorageError as e:
            logger.error(f"Unable to access upload temp file '{path}': {e}")
            raise self._access_error(str(e), cause=e) from e
        if visibility != VISIBILITY_PUBLIC:
            raise self._access_error(f"Temp file '{path}' visibility is {visibility}")
        return backend, path

    def _delete_temp_file(self, backend: StorageBackend, path: str) -> CleanupOutcome:
        try:
            backend.delete(path)
        except StorageError as e:
            logger.warning(f"Unable to delete upload temp file '{path}': {e}")
            return CleanupOutcome(path=path, deleted=False, error=str(e))
        return CleanupOutcome(path=path, deleted=True)

    def read_from_temp_file(self, handle: str) -> FilesByField:
        """
        Read file descriptors saved by a previous request.

        The temp file is single use: it is deleted once read. A failed
        delete is logged and reported in ``last_cleanup``; the descriptors
        stay valid for this request.

        Raises:
            InvalidReferenceError: If the handle is not a safe name.
            StorageAccessError: If the temp file is missing, unreadable or malformed.
        """
        backend, path = self._temp_file(handle)
        try:
            records = json.loads(backend.read(path).decode("utf-8"))
        except StorageError as e:
            logger.error(f"Unable to read upload temp file '{path}': {e}")
            raise self._access_error(str(e), cause=e) from e
        except ValueError as e:
            logger.error(f"Malformed upload temp file '{path}': {e}")
            raise self._access_error(f"Malformed temp file '{path}'", cause=e) from e

        if not isinstance(records, dict):
            raise self._access_error(f"Temp file '{path}' does not hold an object")

        files: FilesByField = {}
        for field, field_records in records.items():
            field_backend = self.resolver.resolve(field)
            try:
                files[field] = [
                    FileDescriptor.from_record(field_backend, record) for record in field_records
                ]
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Invalid record for field '{field}' in '{path}': {e}")
                raise self._access_error(f"Invalid record in '{path}'", cause=e) from e

        self.last_cleanup = self._delete_temp_file(backend, path)
        return files
