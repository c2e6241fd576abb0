"""
Unit tests for settings and the upload option tree.
"""

import pytest

from ferry_core.config import Settings, UploadConfig


class TestUploadConfigLookup:
    """Tests for dotted-path lookups."""

    def test_get_nested_value(self, config):
        assert config.get("upload.default.max-size") == 2500

    def test_get_missing_returns_default(self, config):
        assert config.get("upload.files.image.storage") is None
        assert config.get("upload.files.image.storage", "local") == "local"

    def test_has_key(self, config):
        assert config.has_key("upload.files.avatar")
        assert not config.has_key("upload.files.image")
        assert not config.has_key("upload.default.max-size.nested")

    def test_get_string_rejects_non_strings(self, config):
        assert config.get_string("upload.default.dir") == "/var/uploads"
        assert config.get_string("upload.default.max-size", "x") == "x"

    def test_get_string_list(self, config):
        assert config.get_string_list("upload.files.avatar.extensions") == ["png", "jpg"]
        assert config.get_string_list("upload.default.dir") is None
        assert config.get_string_list("upload.default.types") is None

    def test_get_int(self, config):
        assert config.get_int("upload.default.max-size") == 2500
        assert config.get_int("upload.default.dir", 7) == 7
        assert config.get_int("upload.default.min-size") == 0

    def test_get_int_ignores_booleans(self):
        config = UploadConfig({"upload": {"default": {"max-size": True}}})

        assert config.get_int("upload.default.max-size", 0) == 0

    def test_set_creates_sections(self):
        config = UploadConfig()

        config.set("upload.files.doc.dir", "/srv/docs")

        assert config.get("upload.files.doc.dir") == "/srv/docs"
        assert config.has_key("upload.files.doc")

    def test_options_are_copied(self):
        options = {"upload": {"default": {"dir": "/a"}}}
        config = UploadConfig(options)

        options["upload"]["default"]["dir"] = "/b"

        assert config.get("upload.default.dir") == "/a"


class TestUploadConfigLoading:
    """Tests for loading from YAML and settings."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "upload.yaml"
        path.write_text(
            "upload:\n"
            "  default:\n"
            "    storage: memory\n"
            "    extensions: [png, gif]\n"
            "  files:\n"
            "    avatar:\n"
            "      max-size: 1024\n"
        )

        config = UploadConfig.from_yaml(path)

        assert config.get("upload.default.storage") == "memory"
        assert config.get_string_list("upload.default.extensions") == ["png", "gif"]
        assert config.get_int("upload.files.avatar.max-size") == 1024

    def test_from_missing_yaml_is_empty(self, tmp_path):
        config = UploadConfig.from_yaml(tmp_path / "missing.yaml")

        assert config.as_dict() == {}

    def test_from_settings_uses_env_fallbacks(self):
        app_settings = Settings(UPLOAD_STORAGE="memory", UPLOAD_DIR="/data", UPLOAD_ENABLED=False)

        config = UploadConfig.from_settings(app_settings)

        assert config.get("upload.default.storage") == "memory"
        assert config.get("upload.default.dir") == "/data"
        assert config.get_bool("core.upload.enabled", True) is False

    def test_yaml_values_win_over_env(self, tmp_path):
        path = tmp_path / "upload.yaml"
        path.write_text("upload:\n  default:\n    dir: /from/yaml\n")
        app_settings = Settings(UPLOAD_CONFIG_FILE=str(path), UPLOAD_DIR="/from/env")

        config = UploadConfig.from_settings(app_settings)

        assert config.get("upload.default.dir") == "/from/yaml"
        assert config.get("upload.default.storage") == app_settings.UPLOAD_STORAGE


class TestSettings:
    """Tests for environment-driven settings."""

    def test_env_overrides_default(self, monkeypatch):
        monkeypatch.setenv("UPLOAD_STORAGE", "minio")
        monkeypatch.setenv("MINIO_BUCKET", "media")

        app_settings = Settings()

        assert app_settings.UPLOAD_STORAGE == "minio"
        assert app_settings.MINIO_BUCKET == "media"


# --- Fixtures ---


@pytest.fixture
def config():
    return UploadConfig(
        {
            "upload": {
                "default": {"dir": "/var/uploads", "max-size": 2500},
                "files": {"avatar": {"extensions": ["png", "jpg"]}},
            }
        }
    )
