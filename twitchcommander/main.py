"""Host entry point for twitchcommander.

Initializes logging in two phases (defaults then config-driven),
builds the command registry, subscribes a TwitchCommander to the
host's message source, and waits for SIGTERM/SIGINT before shutting
down in-flight dispatches.

The transport is supplied by the host; this module never opens a
connection itself.

Key functions:
    serve: Async entry point taking a MessageSource and module list.
"""

import asyncio
import signal
from typing import Iterable, Optional

import structlog

from .logging_config import setup_logging


async def serve(
    client,
    modules: Iterable[type],
    *,
    username: str = "",
    provider=None,
    config=None,
    shutdown_event: Optional[asyncio.Event] = None,
):
    """Run the commander until a shutdown signal arrives.

    Args:
        client: Host transport implementing MessageSource.
        modules: BaseModule subclasses to register.
        username: Bot account login name.
        provider: ServiceProvider with any extra registrations the
            modules' factories need. A fresh one is used if omitted.
        config: Config instance (default: get_config()).
        shutdown_event: Event that stops the commander when set. Signal
            handlers are installed on it when omitted.

    Raises:
        DuplicateCommandError: Two modules declare the same key.
        ConfigurationError: The command prefix is unusable.
    """
    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("twitchcommander")

    from .bot import TwitchBot
    from .commander import TwitchCommander
    from .config import get_config
    from .registry import CommandRegistryBuilder

    if config is None:
        config = get_config()
    config.validate()
    config.require_valid()

    # Phase 2: reconfigure with real config
    setup_logging(config)

    # Registry is complete before the subscription starts
    builder = CommandRegistryBuilder(provider)
    registry = builder.add_modules(modules).build()

    bot = TwitchBot(client, username=username)
    commander = TwitchCommander.from_config(bot, registry, builder.provider, config)

    if shutdown_event is None:
        shutdown_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        def handle_shutdown(sig):
            logger.info("shutdown_signal_received", signal=sig.name)
            shutdown_event.set()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, handle_shutdown, sig)
            except NotImplementedError:
                # Windows: fall back to signal.signal for SIGINT
                if sig == signal.SIGINT:
                    signal.signal(
                        signal.SIGINT,
                        lambda s, f: handle_shutdown(signal.SIGINT),
                    )

    try:
        await commander.initialize()
        logger.info("twitchcommander_started", commands=sorted(registry.command_keys))
        await shutdown_event.wait()
    finally:
        await commander.close()
        logger.info("twitchcommander_stopped")

    return commander
