"""Unit tests for settings loading."""

import pytest

from depex.config import Settings, load_settings
from depex.core.exceptions import ConfigError


class TestLoadSettings:
    def test_defaults_when_file_missing(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml", environ={})

        assert settings == Settings()
        assert settings.max_nodes == 200

    def test_reads_yaml_sections(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "api:\n"
            "  url: https://depex.example.org/api\n"
            "  token: abc\n"
            "  timeout: 5\n"
            "graph:\n"
            "  max_nodes: 50\n"
        )

        settings = load_settings(path, environ={})

        assert settings.api_url == "https://depex.example.org/api"
        assert settings.api_token.get_secret_value() == "abc"
        assert settings.timeout == 5
        assert settings.max_retries == 3
        assert settings.max_nodes == 50

    def test_environment_wins(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("graph:\n  max_nodes: 50\n")

        settings = load_settings(path, environ={"DEPEX_MAX_NODES": "75", "DEPEX_API_URL": "http://api"})

        assert settings.max_nodes == 75
        assert settings.api_url == "http://api"

    def test_empty_environment_values_are_ignored(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml", environ={"DEPEX_TIMEOUT": ""})
        assert settings.timeout == 30

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_settings(path, environ={}) == Settings()

    @pytest.mark.parametrize("content", [
        "api: [unclosed",
        "- just\n- a list\n",
        "graph:\n  max_nodes: 0\n",
    ])
    def test_invalid_config(self, tmp_path, content):
        path = tmp_path / "config.yaml"
        path.write_text(content)

        with pytest.raises(ConfigError):
            load_settings(path, environ={})

    def test_invalid_environment_value(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "missing.yaml", environ={"DEPEX_MAX_RETRIES": "many"})
