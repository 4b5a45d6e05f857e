"""Tests for logging setup and secret sanitization."""

import logging
import logging.handlers
from unittest.mock import MagicMock

import pytest
import structlog

from twitchcommander.logging_config import LOGGER_PREFIX, SUBSYSTEMS, sanitize_secrets, setup_logging

TOKEN = "oauth:" + "a1b2c3d4e5" * 3


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo handler and structlog changes made by setup_logging."""
    names = ["", LOGGER_PREFIX] + [f"{LOGGER_PREFIX}.{s}" for s in SUBSYSTEMS]
    saved = {name: (logging.getLogger(name).handlers[:], logging.getLogger(name).level) for name in names}
    yield
    for name, (handlers, level) in saved.items():
        lg = logging.getLogger(name)
        for handler in lg.handlers:
            if handler not in handlers:
                handler.close()
        lg.handlers[:] = handlers
        lg.setLevel(level)
    structlog.reset_defaults()


def test_oauth_token_redacted_in_strings():
    event = sanitize_secrets(None, "info", {"message": f"!login {TOKEN}"})
    assert TOKEN not in event["message"]
    assert "***REDACTED***" in event["message"]


def test_nested_values_redacted():
    event = sanitize_secrets(
        None,
        "info",
        {
            "params": (TOKEN, "plain"),
            "headers": {"Authorization": "Bearer " + "x" * 30},
            "count": 3,
        },
    )
    assert event["params"] == ("***REDACTED***", "plain")
    assert event["headers"]["Authorization"] == "***REDACTED***"
    assert event["count"] == 3


def test_short_values_left_alone():
    event = sanitize_secrets(None, "info", {"message": "oauth:short"})
    assert event["message"] == "oauth:short"


def _config(tmp_path, **levels):
    config = MagicMock()
    config.log_dir = tmp_path / "logs"
    config.logging_level = "INFO"
    config.logging_subsystem_levels = levels
    config.logging_max_file_size_mb = 1
    config.logging_backup_count = 2
    return config


def test_setup_logging_creates_subsystem_files(tmp_path):
    setup_logging(_config(tmp_path, registry="DEBUG"))

    assert (tmp_path / "logs").is_dir()
    for subsystem in SUBSYSTEMS:
        sub_logger = logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}")
        assert any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in sub_logger.handlers
        )
    assert logging.getLogger(f"{LOGGER_PREFIX}.registry").level == logging.DEBUG
    assert logging.getLogger(f"{LOGGER_PREFIX}.commander").level == logging.INFO


def test_setup_logging_falls_back_to_console(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    config = _config(tmp_path)
    config.log_dir = blocker / "logs"

    setup_logging(config)

    pkg_logger = logging.getLogger(LOGGER_PREFIX)
    assert pkg_logger.handlers == []
    assert logging.getLogger().handlers


def test_unknown_subsystem_level_uses_root_level(tmp_path):
    setup_logging(_config(tmp_path, modules="LOUD"))
    assert logging.getLogger(f"{LOGGER_PREFIX}.modules").level == logging.INFO
