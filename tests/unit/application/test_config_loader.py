"""Tests for loading VaultSettings from YAML and the environment."""

import pytest
import yaml

from memorystream.application.config_loader import load_settings
from memorystream.core.domain.errors import ValidationError


@pytest.fixture
def write_yaml(tmp_path):
    def _write(data, name="vault.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


class TestLoadSettings:
    def test_defaults_without_file_or_env(self):
        settings = load_settings(environ={})

        assert settings.min_relevance == 0.5
        assert settings.key_size == 2048

    def test_reads_flat_yaml(self, write_yaml):
        path = write_yaml({"min_relevance": 1.5, "frequency_cap": 2})

        settings = load_settings(path, environ={})

        assert settings.min_relevance == 1.5
        assert settings.frequency_cap == 2.0

    def test_reads_nested_vault_section(self, write_yaml):
        path = write_yaml({"vault": {"default_search_limit": 5, "log_level": "debug"}})

        settings = load_settings(path, environ={})

        assert settings.default_search_limit == 5
        assert settings.log_level == "DEBUG"

    def test_path_from_environment(self, write_yaml):
        path = write_yaml({"recency_window_days": 30})

        settings = load_settings(environ={"MEMORYSTREAM_CONFIG": str(path)})

        assert settings.recency_window_days == 30.0

    def test_environment_overrides_file(self, write_yaml):
        path = write_yaml({"min_relevance": 1.5, "key_size": 4096})

        settings = load_settings(
            path,
            environ={"MEMORYSTREAM_MIN_RELEVANCE": "2.5", "MEMORYSTREAM_KEY_SIZE": ""},
        )

        assert settings.min_relevance == 2.5
        assert settings.key_size == 4096

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            load_settings(tmp_path / "nope.yaml", environ={})

        assert exc_info.value.message == "Settings file not found"

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_settings(path, environ={})

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_settings(path, environ={}).default_list_limit == 50

    def test_empty_vault_section_uses_defaults(self, tmp_path):
        path = tmp_path / "null.yaml"
        path.write_text("vault:\n", encoding="utf-8")

        assert load_settings(path, environ={}).min_relevance == 0.5

    def test_vault_section_must_be_mapping(self, write_yaml):
        path = write_yaml({"vault": ["min_relevance", 1]})

        with pytest.raises(ValidationError):
            load_settings(path, environ={})

    def test_invalid_value(self, write_yaml):
        path = write_yaml({"key_size": 1024})

        with pytest.raises(ValidationError) as exc_info:
            load_settings(path, environ={})

        assert exc_info.value.code == "validation_error"
        assert any("2048" in msg for msg in exc_info.value.details["errors"])

    def test_unknown_key(self, write_yaml):
        path = write_yaml({"relevance": 1})

        with pytest.raises(ValidationError):
            load_settings(path, environ={})

    def test_invalid_env_value(self):
        with pytest.raises(ValidationError):
            load_settings(environ={"MEMORYSTREAM_DEFAULT_LIST_LIMIT": "many"})
