"""Tests for configuration loading."""

from unittest.mock import patch

import pytest

from twitchcommander.config import Config
from twitchcommander.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("TWITCH_COMMAND_PREFIX", "TWITCH_CHANNEL", "TWITCH_OAUTH_TOKEN"):
        monkeypatch.delenv(var, raising=False)


def _write_settings(tmp_path, text):
    (tmp_path / "settings.yaml").write_text(text)
    return Config(config_dir=tmp_path)


def test_defaults_without_settings_file(tmp_path):
    config = Config(config_dir=tmp_path)
    assert config.settings == {}
    assert config.command_prefix == "!"
    assert config.invocation_timeout is None
    assert config.strict_parameters is False
    assert config.logging_level == "INFO"
    assert config.logging_backup_count == 5


def test_settings_yaml_values(tmp_path):
    config = _write_settings(
        tmp_path,
        "commands:\n"
        "  prefix: '?'\n"
        "  invocation_timeout: 15\n"
        "  strict_parameters: true\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  subsystem_levels:\n"
        "    registry: WARNING\n"
        f"log_dir: {tmp_path / 'logs'}\n",
    )
    assert config.command_prefix == "?"
    assert config.invocation_timeout == 15.0
    assert config.strict_parameters is True
    assert config.logging_level == "DEBUG"
    assert config.logging_subsystem_levels == {"registry": "WARNING"}
    assert config.log_dir == tmp_path / "logs"


def test_env_prefix_overrides_settings(tmp_path, monkeypatch):
    config = _write_settings(tmp_path, "commands:\n  prefix: '?'\n")
    monkeypatch.setenv("TWITCH_COMMAND_PREFIX", "$")
    assert config.command_prefix == "$"


def test_dotenv_file_loaded(tmp_path):
    (tmp_path / ".env").write_text("TWITCH_OAUTH_TOKEN=oauth:abc123\nTWITCH_CHANNEL=streamer\n")
    config = Config(config_dir=tmp_path)
    assert config.twitch_oauth_token == "oauth:abc123"
    assert config.twitch_channel == "streamer"


@pytest.mark.parametrize("value", [0, -5, "soon"])
def test_invalid_timeout_disables_limit(tmp_path, value):
    config = _write_settings(tmp_path, f"commands:\n  invocation_timeout: {value}\n")
    assert config.invocation_timeout is None


def test_validate_logs_but_does_not_raise(tmp_path):
    config = _write_settings(tmp_path, "commands:\n  prefix: ''\n  invocation_timeout: -1\n")
    with patch("twitchcommander.config.logger") as mock_logger:
        config.validate()
    keys = [call.kwargs.get("key") for call in mock_logger.error.call_args_list]
    assert "command_prefix" in keys
    mock_logger.warning.assert_called()


@pytest.mark.parametrize("prefix", ["", "! "])
def test_require_valid_rejects_unusable_prefix(tmp_path, prefix):
    config = _write_settings(tmp_path, f"commands:\n  prefix: '{prefix}'\n")
    with pytest.raises(ConfigurationError) as excinfo:
        config.require_valid()
    assert excinfo.value.setting_name == "command_prefix"
    assert excinfo.value.is_fatal


def test_require_valid_accepts_default(tmp_path):
    Config(config_dir=tmp_path).require_valid()
