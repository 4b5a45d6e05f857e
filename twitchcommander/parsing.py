"""Command classification and parsing.

Both functions run on every inbound event and are pure: no logging,
no lookups.
"""

from dataclasses import dataclass
from typing import Tuple

from .responses import MessageResponse, ResponseType

DEFAULT_PREFIX = "!"


@dataclass(frozen=True)
class CommandInvocation:
    """Command key plus positional parameters, as typed in chat."""

    command_key: str
    parameters: Tuple[str, ...] = ()


def is_command(response: MessageResponse, prefix: str = DEFAULT_PREFIX) -> bool:
    """True if the response is a channel chat message starting with ``prefix``."""
    if response.response_type != ResponseType.PRIVMSG:
        return False
    return response.message.startswith(prefix)


def parse_command(message: str, prefix: str = DEFAULT_PREFIX) -> CommandInvocation:
    """Split ``"!greet alice bob"`` into ``CommandInvocation("greet", ("alice", "bob"))``.

    The first whitespace-separated token minus the prefix is the key;
    the rest are parameters in their original order. A bare prefix
    gives an empty key, which simply matches no command.
    """
    tokens = message.split()
    if not tokens:
        return CommandInvocation(command_key="")
    head = tokens[0]
    key = head[len(prefix):] if head.startswith(prefix) else head
    return CommandInvocation(command_key=key, parameters=tuple(tokens[1:]))
