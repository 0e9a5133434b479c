"""
Tests for configuration loading
"""

import pytest

from coursework.core.config import AppConfig, load_config


class TestLoadConfig:
    """YAML loading with environment overrides."""

    def test_defaults_when_file_missing(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yaml"))

        assert config.uploads.max_attachments == 2
        assert config.uploads.default_max_file_size == 10 * 1024 * 1024
        assert "pdf" in config.uploads.allowed_extensions
        assert config.backend.kind == "http"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "backend:\n  kind: memory\n  retry_attempts: 5\nuploads:\n  max_attachments: 4\n",
            encoding="utf-8",
        )
        config = load_config(str(path))

        assert config.backend.kind == "memory"
        assert config.backend.retry_attempts == 5
        assert config.uploads.max_attachments == 4
        assert config.uploads.signed_url_ttl == 3600

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("backend:\n  base_url: http://from-yaml/api/v1\n", encoding="utf-8")
        monkeypatch.setenv("COURSEWORK_BACKEND__BASE_URL", "http://from-env/api/v1")

        config = load_config(str(path))

        assert config.backend.base_url == "http://from-env/api/v1"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert isinstance(load_config(str(path)), AppConfig)

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 9999\n", encoding="utf-8")
        monkeypatch.setenv("COURSEWORK_CONFIG", str(path))

        assert load_config().server.port == 9999


class TestBackendFactory:
    """get_backend picks the implementation from config."""

    def test_kinds(self):
        from coursework.services.backend import (
            HttpAssignmentBackend,
            InMemoryAssignmentBackend,
            get_backend,
        )

        assert isinstance(get_backend(AppConfig(backend={"kind": "memory"})), InMemoryAssignmentBackend)
        assert isinstance(get_backend(AppConfig(backend={"kind": "http"})), HttpAssignmentBackend)

    def test_unknown_kind(self):
        from coursework.services.backend import get_backend

        with pytest.raises(ValueError):
            get_backend(AppConfig(backend={"kind": "ftp"}))

    def test_list_backends(self):
        from coursework.services.backend import list_backends

        assert list_backends() == ["http", "memory"]
