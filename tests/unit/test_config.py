"""
Unit tests for settings loading.

Covers file formats (TOML config.txt, YAML), environment precedence,
defaults, container placeholders, and every validation failure.
"""

import pytest

from src.core.config import (
    ConfigError,
    ConfigValidationError,
    Environment,
    Game,
    Settings,
    load_settings,
    read_config_file,
)


@pytest.fixture
def config_txt(tmp_path):
    """Write a config.txt in the format the container entrypoint produces."""

    def _write(content: str):
        path = tmp_path / "config.txt"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.mark.unit
class TestConfigFile:
    """Settings read from config.txt only."""

    def test_token_and_server_name_only(self, config_txt):
        path = config_txt("token = 'abc123'\nserver_name = 'My Server'\n")

        settings = load_settings(path, environ={})

        assert settings.token == "abc123"
        assert settings.server_name == "My Server"
        assert settings.server_id is None

    def test_game_defaults_to_bf1(self, config_txt):
        path = config_txt("token = 'abc123'\nserver_name = 'My Server'\n")

        settings = load_settings(path, environ={})

        assert settings.game is Game.BF1

    def test_empty_token_fails(self, config_txt):
        path = config_txt("token = ''\nserver_name = 'My Server'\n")

        with pytest.raises(ConfigError) as exc_info:
            load_settings(path, environ={})

        assert exc_info.value.key == "token"

    def test_other_defaults(self, config_txt):
        path = config_txt("token = 'abc123'\nserver_name = 'My Server'\n")

        settings = load_settings(path, environ={})

        assert settings.set_banner_image is True
        assert settings.poll_interval == 60.0
        assert settings.health_port == 3030
        assert settings.log_level == "INFO"
        assert settings.environment is Environment.DEVELOPMENT

    def test_server_id_as_integer(self, config_txt):
        path = config_txt("token = 'abc123'\ngame = 'bfv'\nserver_id = 1234\n")

        settings = load_settings(path, environ={})

        assert settings.game is Game.BFV
        assert settings.server_id == 1234
        assert settings.server_identifier == 1234

    def test_server_name_wins_over_id(self, config_txt):
        path = config_txt("token = 'abc'\nserver_name = 'My Server'\nserver_id = 7\n")

        settings = load_settings(path, environ={})

        assert settings.server_identifier == "My Server"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "token: abc123\nserver_name: My Server\nset_banner_image: false\n",
            encoding="utf-8",
        )

        settings = load_settings(path, environ={})

        assert settings.server_name == "My Server"
        assert settings.set_banner_image is False

    def test_missing_file_is_not_an_error(self, tmp_path):
        assert read_config_file(tmp_path / "nope.txt") == {}

    def test_invalid_toml_raises_config_error(self, config_txt):
        path = config_txt("token = \n")

        with pytest.raises(ConfigError):
            load_settings(path, environ={})

    def test_non_mapping_yaml_raises_config_error(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- token\n- server_name\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            read_config_file(path)


@pytest.mark.unit
class TestEnvironment:
    """Settings read from environment variables."""

    def test_environment_only(self, tmp_path):
        settings = load_settings(
            tmp_path / "missing.txt",
            environ={"token": "env-token", "server_name": "Env Server"},
        )

        assert settings.token == "env-token"
        assert settings.server_name == "Env Server"

    def test_environment_overrides_file(self, config_txt):
        path = config_txt("token = 'file-token'\nserver_name = 'File Server'\ngame = 'bf1'\n")

        settings = load_settings(path, environ={"game": "bfv", "token": "env-token"})

        assert settings.token == "env-token"
        assert settings.game is Game.BFV
        assert settings.server_name == "File Server"

    def test_uppercase_names_accepted(self, tmp_path):
        settings = load_settings(
            tmp_path / "missing.txt",
            environ={"TOKEN": "env-token", "SERVER_ID": "99", "POLL_INTERVAL": "30"},
        )

        assert settings.server_id == 99
        assert settings.poll_interval == 30.0

    @pytest.mark.parametrize("raw,expected", [("false", False), ("0", False), ("Yes", True)])
    def test_set_banner_image_parsing(self, tmp_path, raw, expected):
        settings = load_settings(
            tmp_path / "missing.txt",
            environ={"token": "t", "server_name": "s", "set_banner_image": raw},
        )

        assert settings.set_banner_image is expected

    def test_container_placeholders_count_as_unset(self, tmp_path):
        environ = {
            "token": "real-token",
            "game": "bf1",
            "server_name": "default_server_name_value",
            "server_id": "321",
        }

        settings = load_settings(tmp_path / "missing.txt", environ=environ)

        assert settings.server_name is None
        assert settings.server_identifier == 321

    def test_placeholder_token_fails(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_settings(
                tmp_path / "missing.txt",
                environ={"token": "default_token_value", "server_name": "s"},
            )


@pytest.mark.unit
class TestValidation:
    """Every rejected configuration raises ConfigError."""

    def test_missing_token(self, tmp_path):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(tmp_path / "missing.txt", environ={"server_name": "s"})

        assert exc_info.value.key == "token"

    def test_missing_server(self, tmp_path):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(tmp_path / "missing.txt", environ={"token": "t"})

        assert exc_info.value.key == "server_name"

    def test_unsupported_game(self, tmp_path):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(
                tmp_path / "missing.txt",
                environ={"token": "t", "server_name": "s", "game": "bf4"},
            )

        assert exc_info.value.key == "game"

    def test_non_integer_server_id(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_settings(tmp_path / "missing.txt", environ={"token": "t", "server_id": "abc"})

    def test_invalid_boolean(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_settings(
                tmp_path / "missing.txt",
                environ={"token": "t", "server_name": "s", "set_banner_image": "maybe"},
            )

    def test_interval_below_minimum(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_settings(
                tmp_path / "missing.txt",
                environ={"token": "t", "server_name": "s", "poll_interval": "1"},
            )

    def test_port_out_of_range(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_settings(
                tmp_path / "missing.txt",
                environ={"token": "t", "server_name": "s", "health_port": "70000"},
            )

    def test_invalid_log_level_falls_back_to_info(self, tmp_path):
        settings = load_settings(
            tmp_path / "missing.txt",
            environ={"token": "t", "server_name": "s", "log_level": "chatty"},
        )

        assert settings.log_level == "INFO"


@pytest.mark.unit
class TestSettingsRecord:
    def test_settings_are_immutable(self, settings):
        with pytest.raises(AttributeError):
            settings.token = "other"

    def test_summary_hides_token(self, settings):
        summary = settings.summary()

        assert "token" not in summary
        assert summary["token_set"] is True

    def test_server_identifier_prefers_name(self, settings):
        assert settings.server_identifier == settings.server_name

    def test_server_identifier_falls_back_to_id(self):
        settings = Settings(token="abc", server_id=42)

        assert settings.server_identifier == 42

    def test_server_identifier_without_server_raises(self):
        settings = Settings(token="abc")

        with pytest.raises(ConfigValidationError) as exc_info:
            settings.server_identifier

        assert exc_info.value.key == "server_name"
