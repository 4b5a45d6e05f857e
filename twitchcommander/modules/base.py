"""Base class and marker decorator for command modules.

A module is a BaseModule subclass whose command methods carry the
@command decorator. The commander creates a fresh module instance per
invocation and binds the invoking user, channel and bot onto it through
the bind_* setters before calling the method.

Key classes:
    BaseModule: Base class every command module extends.

Key functions:
    command: Decorator that marks a method with its command key.
    command_methods: List the (key, function) pairs declared on a class.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

import structlog

if TYPE_CHECKING:
    from ..bot import TwitchBot
    from ..proxies import ChannelProxy, UserProxy

logger = structlog.get_logger("twitchcommander.modules")

# Attribute set on decorated functions
COMMAND_KEY_ATTR = "__command_key__"


def command(key: str) -> Callable[[Callable], Callable]:
    """Mark a module method as the handler for ``key``.

    The function is returned unchanged apart from the marker attribute,
    so it stays a plain method on the class::

        class Greetings(BaseModule):
            @command("greet")
            async def greet(self, name):
                await self.reply(f"Hello {name}")
    """
    if not isinstance(key, str):
        raise TypeError(f"command key must be a string, got {type(key).__name__}")

    def wrap(func: Callable) -> Callable:
        setattr(func, COMMAND_KEY_ATTR, key)
        return func
    return wrap


def command_methods(module_type: type) -> List[Tuple[str, Callable]]:
    """Return (key, function) for every @command method on a class.

    Inherited methods are included, base classes first, in definition
    order. An override without the decorator hides the base command.
    """
    functions = {}
    for klass in reversed(module_type.__mro__):
        for name, member in vars(klass).items():
            if inspect.isfunction(member):
                functions[name] = member
    return [
        (getattr(fn, COMMAND_KEY_ATTR), fn)
        for fn in functions.values()
        if getattr(fn, COMMAND_KEY_ATTR, None) is not None
    ]


class BaseModule:
    """Base class for command modules.

    Context slots are empty until the commander binds them; reading one
    before that raises RuntimeError, mirroring a handler being used
    outside a dispatch.
    """

    def __init__(self):
        self._user: Optional["UserProxy"] = None
        self._channel: Optional["ChannelProxy"] = None
        self._bot: Optional["TwitchBot"] = None

    # --- Context setters (called by ContextInjector) ---

    def bind_user(self, user: "UserProxy") -> None:
        self._user = user

    def bind_channel(self, channel: "ChannelProxy") -> None:
        self._channel = channel

    def bind_bot(self, bot: "TwitchBot") -> None:
        self._bot = bot

    # --- Context getters ---

    @property
    def user(self) -> "UserProxy":
        if self._user is None:
            raise RuntimeError("Module not dispatched: user not available")
        return self._user

    @property
    def channel(self) -> "ChannelProxy":
        if self._channel is None:
            raise RuntimeError("Module not dispatched: channel not available")
        return self._channel

    @property
    def bot(self) -> "TwitchBot":
        if self._bot is None:
            raise RuntimeError("Module not dispatched: bot not available")
        return self._bot

    async def reply(self, message: str) -> None:
        """Send a chat line to the channel the command came from."""
        await self.bot.send_message(self.channel.channel, message)
