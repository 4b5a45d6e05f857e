"""Per-invocation context objects handed to command modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .bot import TwitchBot
    from .responses import MessageResponse


@dataclass(frozen=True)
class UserProxy:
    """Identity and role flags of the chatter who sent the command."""

    name: str
    color: str = ""
    is_broadcaster: bool = False
    is_moderator: bool = False
    is_subscriber: bool = False
    is_vip: bool = False

    @property
    def is_privileged(self) -> bool:
        """Broadcaster or moderator."""
        return self.is_broadcaster or self.is_moderator


@dataclass(frozen=True)
class ChannelProxy:
    """Channel the command was sent in."""

    channel: str


@dataclass(frozen=True)
class InvocationContext:
    """Everything injected into a module before one command runs."""

    user: UserProxy
    channel: ChannelProxy
    bot: "TwitchBot"

    @classmethod
    def from_response(cls, response: "MessageResponse", bot: "TwitchBot") -> "InvocationContext":
        return cls(
            user=UserProxy(
                name=response.name,
                color=response.color,
                is_broadcaster=response.is_broadcaster,
                is_moderator=response.is_moderator,
                is_subscriber=response.is_subscriber,
                is_vip=response.is_vip,
            ),
            channel=ChannelProxy(channel=response.channel),
            bot=bot,
        )
