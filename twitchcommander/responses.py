"""Pydantic models for inbound chat events.

The transport layer turns raw IRC lines into MessageResponse objects;
the commander only ever reads them.

Enums:
    ResponseType

Models:
    MessageResponse
"""

from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class ResponseType(str, Enum):
    """Kind of event delivered by the message source.

    Only PRIVMSG (a plain channel chat message) can carry a command.
    """
    PRIVMSG = "PRIVMSG"
    NOTICE = "NOTICE"
    USERNOTICE = "USERNOTICE"
    WHISPER = "WHISPER"
    JOIN = "JOIN"
    PART = "PART"
    PING = "PING"
    ROOMSTATE = "ROOMSTATE"
    USERSTATE = "USERSTATE"
    CLEARCHAT = "CLEARCHAT"
    UNKNOWN = "UNKNOWN"


def _badge_names(raw: Optional[str]) -> set:
    """Parse an IRCv3 ``badges`` tag ("broadcaster/1,subscriber/12")."""
    if not raw:
        return set()
    return {badge.split("/", 1)[0] for badge in raw.split(",") if badge}


class MessageResponse(BaseModel):
    """A parsed chat event with sender identity and role flags."""

    model_config = ConfigDict(frozen=True)

    response_type: ResponseType = ResponseType.UNKNOWN
    name: str = ""
    color: str = ""
    is_broadcaster: bool = False
    is_moderator: bool = False
    is_subscriber: bool = False
    is_vip: bool = False
    channel: str = ""
    message: str = ""

    @classmethod
    def from_tags(
        cls,
        tags: Mapping[str, str],
        channel: str,
        message: str,
        response_type: ResponseType = ResponseType.PRIVMSG,
    ) -> "MessageResponse":
        """Build a response from IRCv3 message tags.

        Role flags come from the ``badges`` tag, with the legacy
        ``mod``/``subscriber``/``vip`` tags honoured as well. A leading
        ``#`` on the channel is dropped.

        Args:
            tags: Tag mapping as sent by Twitch (``display-name``, ``color``,
                ``badges``, ``mod``, ``subscriber``, ``vip``).
            channel: Channel name, with or without ``#``.
            message: Raw message text.
            response_type: Event kind, PRIVMSG by default.
        """
        badges = _badge_names(tags.get("badges"))
        return cls(
            response_type=response_type,
            name=tags.get("display-name", ""),
            color=tags.get("color", ""),
            is_broadcaster="broadcaster" in badges,
            is_moderator="moderator" in badges or tags.get("mod") == "1",
            is_subscriber="subscriber" in badges or tags.get("subscriber") == "1",
            is_vip="vip" in badges or tags.get("vip") == "1",
            channel=channel.lstrip("#"),
            message=message,
        )
