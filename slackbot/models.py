"""
Event types, route qualifiers and errors for the Slack bot dispatcher.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class EventKind(Enum):
    """Kind of an inbound event, used to classify and to filter routes."""
    CONNECTED = "connected"
    MESSAGE = "message"
    INVALID_AUTH = "invalid_auth"
    TRANSPORT_ERROR = "transport_error"
    OTHER = "other"


class MessageType(Enum):
    """How a message relates to the bot."""
    DIRECT_MESSAGE = "direct_message"
    DIRECT_MENTION = "direct_mention"
    MENTION = "mention"
    AMBIENT = "ambient"


@dataclass(frozen=True)
class ConnectedEvent:
    """The connection (re)established; carries the bot's own identity."""
    user_id: str
    user_name: str
    connection_count: int = 1
    kind: EventKind = field(default=EventKind.CONNECTED, init=False)


@dataclass(frozen=True)
class MessageEvent:
    """A chat message posted to a channel the bot can see."""
    channel: str
    user: str
    text: str
    raw: dict[str, Any] = field(default_factory=dict)
    subtype: Optional[str] = None
    bot_id: Optional[str] = None
    kind: EventKind = field(default=EventKind.MESSAGE, init=False)


@dataclass(frozen=True)
class InvalidAuthEvent:
    """The platform rejected the bot's credentials."""
    error: str = "invalid_auth"
    kind: EventKind = field(default=EventKind.INVALID_AUTH, init=False)


@dataclass(frozen=True)
class TransportErrorEvent:
    """A transport level error surfaced by the connection."""
    error_kind: str
    message: str
    kind: EventKind = field(default=EventKind.TRANSPORT_ERROR, init=False)


@dataclass(frozen=True)
class OtherEvent:
    """Any event the dispatcher does not act on."""
    type: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)
    kind: EventKind = field(default=EventKind.OTHER, init=False)


Event = Union[ConnectedEvent, MessageEvent, InvalidAuthEvent, TransportErrorEvent, OtherEvent]


class SlackbotError(Exception):
    """Base class for dispatcher errors."""


class RouteFrozenError(SlackbotError):
    """Raised when a route or router is configured after the bot started."""
