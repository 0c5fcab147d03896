"""Tests for configuration management."""

import pytest
import yaml

from prreview.config import ConfigError


class TestConfigManager:
    """Test ConfigManager functionality."""

    def test_defaults_without_files(self, isolated_config_manager):
        config = isolated_config_manager.load_config()

        assert config.review.test_command == "npm test"
        assert config.github.token is None

    def test_default_config_creation(self, isolated_config_manager):
        config_path = isolated_config_manager.create_default_config(user_level=True)

        assert config_path.exists()
        with open(config_path) as f:
            data = yaml.safe_load(f)

        assert data["version"] == "1.0"
        assert data["review"]["install_command"] == "npm install"
        assert "token" not in data["github"]

    def test_project_config_overrides_user(self, isolated_config_manager, temp_home):
        user_path = isolated_config_manager._user_config_path
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text(yaml.safe_dump({"review": {"test_command": "make test", "install_command": "make"}}))

        project_path = temp_home / "project" / ".prreview" / "config.yaml"
        project_path.parent.mkdir(parents=True)
        project_path.write_text(yaml.safe_dump({"review": {"test_command": "pytest"}}))
        isolated_config_manager._project_config_path = project_path

        config = isolated_config_manager.load_config()

        assert config.review.test_command == "pytest"
        assert config.review.install_command == "make"

    def test_env_var_expansion(self, isolated_config_manager, monkeypatch):
        monkeypatch.setenv("TEST_TOKEN", "secret-token")
        user_path = isolated_config_manager._user_config_path
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text(
            yaml.safe_dump(
                {
                    "github": {
                        "token": "${TEST_TOKEN}",
                        "username": "${MISSING_USER:-octo}",
                    }
                }
            )
        )

        config = isolated_config_manager.load_config()

        assert config.github.token == "secret-token"
        assert config.github.username == "octo"

    def test_env_overrides(self, isolated_config_manager, monkeypatch):
        monkeypatch.setenv("PRREVIEW_GITHUB__TOKEN", "from-env")
        monkeypatch.setenv("PRREVIEW_GITHUB__TIMEOUT", "60")
        monkeypatch.setenv("PRREVIEW_REVIEW__TEST_COMMAND", "yarn test")

        config = isolated_config_manager.load_config()

        assert config.github.token == "from-env"
        assert config.github.timeout == 60
        assert config.review.test_command == "yarn test"

    def test_invalid_config(self, isolated_config_manager):
        user_path = isolated_config_manager._user_config_path
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text(yaml.safe_dump({"github": {"timeout": -1}}))

        with pytest.raises(ConfigError, match="Invalid configuration"):
            isolated_config_manager.load_config()

    def test_invalid_yaml(self, isolated_config_manager):
        user_path = isolated_config_manager._user_config_path
        user_path.parent.mkdir(parents=True, exist_ok=True)
        user_path.write_text("github: [unclosed")

        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            isolated_config_manager.load_config()

    def test_set_and_get_value(self, isolated_config_manager):
        isolated_config_manager.set_config_value("review.test_command", "tox")

        assert isolated_config_manager.get_config_value("review.test_command") == "tox"
        with open(isolated_config_manager._user_config_path) as f:
            assert yaml.safe_load(f)["review"]["test_command"] == "tox"

    def test_set_project_value(self, isolated_config_manager, temp_home):
        isolated_config_manager.set_config_value("github.remote", "upstream", user_level=False)

        project_path = temp_home / "work" / ".prreview" / "config.yaml"
        assert isolated_config_manager.list_config_files()["project"] == project_path
        assert isolated_config_manager.get_config_value("github.remote") == "upstream"

    def test_missing_key(self, isolated_config_manager):
        with pytest.raises(ConfigError, match="not found"):
            isolated_config_manager.get_config_value("review.nope")
