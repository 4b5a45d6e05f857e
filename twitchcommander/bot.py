"""Bot reference handed to command modules.

The transport (IRC/WebSocket connection, reconnects, rate limiting)
lives outside this package. It only has to satisfy MessageSource:
deliver parsed responses to subscribers and send chat lines back.

Key classes:
    MessageSource: Protocol the host transport implements.
    TwitchBot: Thin facade over a MessageSource that modules use to reply.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

import structlog

from .responses import MessageResponse

logger = structlog.get_logger("twitchcommander.modules")

ReceiveCallback = Callable[[MessageResponse], Awaitable[None]]


@runtime_checkable
class MessageSource(Protocol):
    """Inbound event stream plus an outbound chat channel."""

    def subscribe_receive(self, callback: ReceiveCallback) -> None:
        """Register an async callback invoked once per inbound response."""
        ...

    async def send_message(self, channel: str, message: str) -> None:
        """Send a chat line to a channel."""
        ...


class TwitchBot:
    """Bot identity and reply channel shared by every invocation.

    Args:
        client: The host transport.
        username: Login name of the bot account.
    """

    def __init__(self, client: MessageSource, username: str = ""):
        self.client = client
        self.username = username

    async def send_message(self, channel: str, message: str) -> None:
        """Send a chat line via the transport."""
        logger.debug("send_message", channel=channel, length=len(message))
        await self.client.send_message(channel, message)

    def __repr__(self) -> str:
        return f"TwitchBot(username={self.username!r})"
