"""
Pattern-routed event dispatch for Slack bots.

Contains the receive loop, ordered routing, request context and reply helpers.
"""

from .models import (
    ConnectedEvent,
    Event,
    EventKind,
    InvalidAuthEvent,
    MessageEvent,
    MessageType,
    OtherEvent,
    RouteFrozenError,
    SlackbotError,
    TransportErrorEvent,
)
from .context import (
    Context,
    PatternMatches,
    add_bot_to_context,
    add_matches_to_context,
    add_message_to_context,
    bot_from_context,
    matches_from_context,
    message_from_context,
)
from .router import Route, RouteMatch, Router
from .typing_delay import MAX_TYPING_DELAY, estimate_delay
from .connection import Connection, RTMConnection, event_from_payload
from .bot import WITH_TYPING, WITHOUT_TYPING, Bot
from .plugin_loader import PluginLoader

__all__ = [
    'Bot',
    'WITH_TYPING',
    'WITHOUT_TYPING',
    'Connection',
    'RTMConnection',
    'event_from_payload',
    'Context',
    'PatternMatches',
    'add_bot_to_context',
    'add_matches_to_context',
    'add_message_to_context',
    'bot_from_context',
    'matches_from_context',
    'message_from_context',
    'Route',
    'RouteMatch',
    'Router',
    'MAX_TYPING_DELAY',
    'estimate_delay',
    'PluginLoader',
    'ConnectedEvent',
    'Event',
    'EventKind',
    'InvalidAuthEvent',
    'MessageEvent',
    'MessageType',
    'OtherEvent',
    'TransportErrorEvent',
    'RouteFrozenError',
    'SlackbotError',
]
