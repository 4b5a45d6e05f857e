"""Command-dispatch core for Twitch chat bots.

Routes prefixed chat messages to methods on BaseModule subclasses,
binding the invoking user, channel and bot onto a fresh module
instance for every call.
"""

from .bot import MessageSource, TwitchBot
from .commander import TwitchCommander
from .exceptions import (
    CommanderError,
    ConfigurationError,
    ContextBindingError,
    DuplicateCommandError,
    ErrorCategory,
    InvocationTimeoutError,
    ParameterMismatchError,
    RegistryError,
    ResolutionError,
)
from .injector import ContextInjector
from .modules import BaseModule, command
from .parsing import CommandInvocation, is_command, parse_command
from .providers import InstanceProvider, ServiceProvider
from .proxies import ChannelProxy, InvocationContext, UserProxy
from .registry import (
    CommandDescriptor,
    CommandRegistry,
    CommandRegistryBuilder,
    build_registry,
)
from .responses import MessageResponse, ResponseType

__version__ = "0.1.0"

__all__ = [
    # Core
    "TwitchCommander",
    "TwitchBot",
    "MessageSource",
    # Modules
    "BaseModule",
    "command",
    # Registry
    "CommandDescriptor",
    "CommandRegistry",
    "CommandRegistryBuilder",
    "build_registry",
    # Resolution and context
    "InstanceProvider",
    "ServiceProvider",
    "ContextInjector",
    "UserProxy",
    "ChannelProxy",
    "InvocationContext",
    # Parsing
    "CommandInvocation",
    "is_command",
    "parse_command",
    "MessageResponse",
    "ResponseType",
    # Errors
    "CommanderError",
    "ErrorCategory",
    "InvocationTimeoutError",
    "RegistryError",
    "DuplicateCommandError",
    "ParameterMismatchError",
    "ContextBindingError",
    "ResolutionError",
    "ConfigurationError",
]
