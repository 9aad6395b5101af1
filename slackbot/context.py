"""
Request-scoped context passed to route handlers.

A Context is an immutable chain of bindings. Each ``with_value`` call returns
a new Context whose parent is the old one, so bindings added while handling
one event are never visible through another event's context.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .bot import Bot
    from .models import MessageEvent

_MISSING = object()

BOT_KEY = "slackbot.bot"
MESSAGE_KEY = "slackbot.message"
MATCHES_KEY = "slackbot.matches"


@dataclass(frozen=True)
class PatternMatches:
    """Capture groups of the route pattern that matched the message."""
    text: str = ""
    groups: tuple[Optional[str], ...] = ()
    named: tuple[tuple[str, Optional[str]], ...] = ()

    def group(self, index: int) -> Optional[str]:
        """Return capture group ``index``; group 0 is the whole match."""
        if index == 0:
            return self.text
        if index > len(self.groups):
            return None
        return self.groups[index - 1]

    def get(self, name: str) -> Optional[str]:
        return dict(self.named).get(name)


class Context:
    """An immutable, append-only set of key/value bindings."""

    __slots__ = ("_parent", "_key", "_value")

    def __init__(self, parent: Optional["Context"] = None, key: Any = _MISSING, value: Any = None):
        self._parent = parent
        self._key = key
        self._value = value

    @classmethod
    def background(cls) -> "Context":
        """Return an empty root context."""
        return cls()

    def with_value(self, key: Any, value: Any) -> "Context":
        """Return a new context with ``key`` bound to ``value``."""
        return Context(self, key, value)

    def value(self, key: Any, default: Any = None) -> Any:
        """Look up the most recent binding for ``key``."""
        ctx = self
        while ctx is not None:
            if ctx._key is not _MISSING and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    def __contains__(self, key: Any) -> bool:
        return self.value(key, _MISSING) is not _MISSING

    def __repr__(self) -> str:
        keys = []
        ctx = self
        while ctx is not None:
            if ctx._key is not _MISSING:
                keys.append(ctx._key)
            ctx = ctx._parent
        return f"Context(keys={list(reversed(keys))!r})"


def add_bot_to_context(ctx: Context, bot: "Bot") -> Context:
    return ctx.with_value(BOT_KEY, bot)


def bot_from_context(ctx: Context) -> Optional["Bot"]:
    return ctx.value(BOT_KEY)


def add_message_to_context(ctx: Context, event: "MessageEvent") -> Context:
    return ctx.with_value(MESSAGE_KEY, event)


def message_from_context(ctx: Context) -> Optional["MessageEvent"]:
    return ctx.value(MESSAGE_KEY)


def add_matches_to_context(ctx: Context, matches: PatternMatches) -> Context:
    return ctx.with_value(MATCHES_KEY, matches)


def matches_from_context(ctx: Context) -> PatternMatches:
    """Return the capture groups bound to ``ctx``, empty if none were bound."""
    return ctx.value(MATCHES_KEY, PatternMatches())
