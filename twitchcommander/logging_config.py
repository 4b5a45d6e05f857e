"""Logging setup for twitchcommander.

Events go through structlog into the stdlib ``twitchcommander`` logger
tree. The package logger writes a combined file; each name in
SUBSYSTEMS (``twitchcommander.commander`` and so on) also writes its own
file and propagates to the combined file and the console.

setup_logging is called twice by the host: once with no config so that
startup errors are visible, and again once Config has loaded.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

import structlog

SUBSYSTEMS = ("commander", "registry", "modules")

LOGGER_PREFIX = "twitchcommander"

DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"

_SECRET_PATTERNS = [
    re.compile(r"oauth:[a-zA-Z0-9]{20,}"),
    re.compile(r"Bearer\s+[a-zA-Z0-9_./-]{20,}"),
    re.compile(r"client_secret=[a-zA-Z0-9]{20,}"),
]

_REDACTED = "***REDACTED***"


def _scrub(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that redacts Twitch OAuth tokens and client secrets.

    Chat lines are logged as received, so a token pasted into chat would
    otherwise reach the log files. String values are scrubbed, as are
    strings one level down inside lists, tuples and dicts.
    """
    for key, value in event_dict.items():
        if isinstance(value, (list, tuple)):
            event_dict[key] = type(value)(_scrub(v) for v in value)
        elif isinstance(value, dict):
            event_dict[key] = {k: _scrub(v) for k, v in value.items()}
        else:
            event_dict[key] = _scrub(value)
    return event_dict


class _Settings(NamedTuple):
    log_dir: Path
    level: int
    subsystem_levels: Dict[str, str]
    max_bytes: int
    backup_count: int
    cache_loggers: bool


def _resolve_settings(config) -> _Settings:
    if config is None:
        return _Settings(DEFAULT_LOG_DIR, logging.INFO, {}, 10 * 1024 * 1024, 5, False)
    return _Settings(
        log_dir=config.log_dir,
        level=_level(config.logging_level, logging.INFO),
        subsystem_levels=config.logging_subsystem_levels,
        max_bytes=config.logging_max_file_size_mb * 1024 * 1024,
        backup_count=config.logging_backup_count,
        cache_loggers=True,
    )


def _level(name: Optional[str], default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def _rotating_handler(
    path: Path, level: int, settings: _Settings, formatter: logging.Formatter
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _reset_logger(name: str, level: int) -> logging.Logger:
    target = logging.getLogger(name)
    target.setLevel(level)
    target.handlers.clear()
    target.propagate = True
    return target


def setup_logging(config=None) -> None:
    """Configure structlog and the stdlib handlers behind it.

    Args:
        config: Loaded Config, or None for defaults. Logger caching is
            only enabled once a real config is supplied, so loggers
            created during the first call pick up the second.

    If the log directory cannot be created the process keeps running
    with console output only.
    """
    settings = _resolve_settings(config)

    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        write_files = True
    except OSError as exc:
        print(
            f"WARNING: Cannot create log directory {settings.log_dir}: {exc}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        write_files = False

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    # Handlers do the level filtering; loggers pass everything through
    root_logger = _reset_logger("", logging.DEBUG)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    )
    root_logger.addHandler(console_handler)

    pkg_logger = _reset_logger(LOGGER_PREFIX, logging.DEBUG)
    if write_files:
        pkg_logger.addHandler(
            _rotating_handler(
                settings.log_dir / f"{LOGGER_PREFIX}.log",
                settings.level,
                settings,
                file_formatter,
            )
        )

    for subsystem in SUBSYSTEMS:
        level = _level(settings.subsystem_levels.get(subsystem), settings.level)
        sub_logger = _reset_logger(f"{LOGGER_PREFIX}.{subsystem}", level)
        if write_files:
            sub_logger.addHandler(
                _rotating_handler(
                    settings.log_dir / f"{subsystem}.log", level, settings, file_formatter
                )
            )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            sanitize_secrets,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=settings.cache_loggers,
    )
