"""
Unit tests for the local filesystem upload backend.
"""

import os
import stat

import pytest

from app.upload.backends.local_storage import LocalStorage
from app.upload.storage_protocol import VISIBILITY_PRIVATE, VISIBILITY_PUBLIC, StorageBackend
from ferry_core.domain.exceptions import StorageConflictError, StorageError, StorageNotFoundError


class TestLocalStorageSetup:
    """Tests for construction and the root directory."""

    def test_implements_protocol(self, storage):
        assert isinstance(storage, StorageBackend)

    def test_requires_root_dir(self):
        with pytest.raises(ValueError):
            LocalStorage("")

    def test_missing_root_is_not_created(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "missing"))

        with pytest.raises(StorageError):
            storage.create_directory("abc")

        assert not (tmp_path / "missing").exists()


class TestLocalStorageDirectories:
    """Tests for directory creation and visibility."""

    def test_create_directory_is_public(self, storage, tmp_path):
        storage.create_directory("3f2a9c")

        assert (tmp_path / "3f2a9c").is_dir()
        assert storage.visibility("3f2a9c") == VISIBILITY_PUBLIC

    def test_create_directory_is_idempotent(self, storage):
        storage.create_directory("tmp")
        storage.create_directory("tmp")

        assert storage.visibility("tmp") == VISIBILITY_PUBLIC

    def test_private_directory(self, storage, tmp_path):
        storage.create_directory("locked")
        os.chmod(tmp_path / "locked", 0o700)

        assert storage.visibility("locked") == VISIBILITY_PRIVATE

    def test_visibility_of_missing_path(self, storage):
        with pytest.raises(StorageNotFoundError):
            storage.visibility("nope")

    def test_path_escaping_root_is_rejected(self, storage):
        with pytest.raises(StorageError):
            storage.create_directory("../outside")


class TestLocalStorageFiles:
    """Tests for file write, read and delete."""

    def test_write_and_read(self, storage, tmp_path):
        storage.write("dir/a.txt", b"hello")

        assert storage.read("dir/a.txt") == b"hello"
        assert storage.file_exists("dir/a.txt")
        assert stat.S_IMODE((tmp_path / "dir" / "a.txt").stat().st_mode) == 0o644

    def test_write_never_overwrites(self, storage):
        storage.write("a.txt", b"first")

        with pytest.raises(StorageConflictError):
            storage.write("a.txt", b"second")

        assert storage.read("a.txt") == b"first"

    def test_read_missing(self, storage):
        with pytest.raises(StorageNotFoundError):
            storage.read("missing.txt")

    def test_delete(self, storage):
        storage.write("a.txt", b"x")

        storage.delete("a.txt")

        assert not storage.file_exists("a.txt")

    def test_delete_missing(self, storage):
        with pytest.raises(StorageNotFoundError):
            storage.delete("a.txt")

    def test_file_modes_from_options(self, tmp_path):
        storage = LocalStorage(str(tmp_path), {"file_mode": 0o600})

        storage.write("secret.txt", b"x")

        assert storage.visibility("secret.txt") == VISIBILITY_PRIVATE


# --- Fixtures ---


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path))
