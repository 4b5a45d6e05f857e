"""Configuration management for twitchcommander.

Loads settings.yaml and environment variables (.env) into a typed
Config object. Property getters provide safe access with defaults for
command dispatch, logging, and the Twitch connection details handed to
the host transport.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .parsing import DEFAULT_PREFIX

logger = structlog.get_logger("twitchcommander.commander")


class Config:
    """Central configuration manager for twitchcommander.

    Loads settings.yaml and .env from the config directory. Read-only
    after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def validate(self):
        """Validate settings at startup.

        Logs warnings/errors but does not raise; use require_valid()
        where an unusable prefix must stop the host.
        """
        prefix = self.command_prefix
        if not prefix:
            logger.error("config_invalid_value", key="command_prefix", value=prefix)
        elif any(ch.isspace() for ch in prefix):
            logger.error(
                "config_invalid_value",
                key="command_prefix",
                value=prefix,
                valid="no whitespace",
            )

        timeout = self.settings.get("commands", {}).get("invocation_timeout")
        if timeout is not None and self.invocation_timeout is None:
            logger.warning(
                "config_invalid_value",
                key="commands.invocation_timeout",
                value=timeout,
                valid="positive number",
            )

        if not self.twitch_oauth_token:
            logger.warning("no_oauth_token", msg="Transport will not be able to log in")

    def require_valid(self) -> None:
        """Raise ConfigurationError if the command prefix cannot be used."""
        prefix = self.command_prefix
        if not prefix or any(ch.isspace() for ch in prefix):
            raise ConfigurationError(
                "command_prefix must be a non-empty string without whitespace",
                setting_name="command_prefix",
                value=prefix,
            )

    @property
    def command_prefix(self) -> str:
        """Chat prefix marking a command. Env var TWITCH_COMMAND_PREFIX takes precedence."""
        env_prefix = os.environ.get("TWITCH_COMMAND_PREFIX")
        if env_prefix is not None:
            return env_prefix
        return self.settings.get("commands", {}).get("prefix", DEFAULT_PREFIX)

    @property
    def invocation_timeout(self) -> Optional[float]:
        """Seconds a handler may run before it is cancelled (default: no limit)."""
        val = self.settings.get("commands", {}).get("invocation_timeout")
        if val is None:
            return None
        try:
            timeout = float(val)
        except (ValueError, TypeError):
            return None
        return timeout if timeout > 0 else None

    @property
    def strict_parameters(self) -> bool:
        """Reject messages with more tokens than the handler declares (default False)."""
        return bool(self.settings.get("commands", {}).get("strict_parameters", False))

    @property
    def twitch_channel(self) -> str:
        """Channel the host transport joins. Env var TWITCH_CHANNEL takes precedence."""
        return os.environ.get("TWITCH_CHANNEL") or self.settings.get("twitch", {}).get("channel", "")

    @property
    def twitch_oauth_token(self) -> str:
        """IRC password for the bot account (env only, never read from settings.yaml)."""
        return os.environ.get("TWITCH_OAUTH_TOKEN", "")

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"registry": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
