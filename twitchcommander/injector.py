"""Binds per-invocation context onto command module instances.

Each context kind maps to one setter on BaseModule. Binding a user
touches only the user slot; channel and bot stay as they were until
their own step runs.
"""

from typing import Any, Dict

import structlog

from .bot import TwitchBot
from .exceptions import ContextBindingError
from .modules.base import BaseModule
from .proxies import ChannelProxy, InvocationContext, UserProxy

logger = structlog.get_logger("twitchcommander.commander")

# context type -> BaseModule setter name
_SETTERS: Dict[type, str] = {
    UserProxy: "bind_user",
    ChannelProxy: "bind_channel",
    TwitchBot: "bind_bot",
}


class ContextInjector:
    """Assigns user, channel and bot context onto a module instance."""

    def inject(self, instance: Any, context_object: Any) -> None:
        """Bind a single context object onto ``instance``.

        Raises:
            ContextBindingError: The instance is not a BaseModule, or
                the context object is not a known kind.
        """
        kind = type(context_object).__name__
        handler_type = type(instance).__name__

        if not isinstance(instance, BaseModule):
            raise ContextBindingError(
                f"{handler_type} does not extend BaseModule",
                handler_type=handler_type,
                context_kind=kind,
            )

        setter_name = self._setter_for(context_object)
        if setter_name is None:
            raise ContextBindingError(
                f"No context slot for {kind} on {handler_type}",
                handler_type=handler_type,
                context_kind=kind,
            )

        getattr(instance, setter_name)(context_object)
        logger.debug("context_bound", handler=handler_type, kind=kind)

    def inject_all(self, instance: Any, context: InvocationContext) -> None:
        """Bind user, bot and channel, in that order."""
        self.inject(instance, context.user)
        self.inject(instance, context.bot)
        self.inject(instance, context.channel)

    @staticmethod
    def _setter_for(context_object: Any):
        for context_type, setter_name in _SETTERS.items():
            if isinstance(context_object, context_type):
                return setter_name
        return None
