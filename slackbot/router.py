"""
Ordered, pattern based routing of events to handlers.

Routes are tried in the order they were registered and the first one that
matches wins, so register specific patterns before general ones.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from .context import Context, PatternMatches, add_matches_to_context, bot_from_context
from .models import Event, EventKind, MessageEvent, MessageType, RouteFrozenError

logger = logging.getLogger(__name__)

Handler = Callable[[Context], None]


def classify_message(event: MessageEvent, bot_user_id: str) -> MessageType:
    """Work out how a message relates to the bot user."""
    if event.channel.startswith("D"):
        return MessageType.DIRECT_MESSAGE

    if bot_user_id:
        mention = f"<@{bot_user_id}>"
        if event.text.startswith(mention):
            return MessageType.DIRECT_MENTION
        if mention in event.text:
            return MessageType.MENTION

    return MessageType.AMBIENT


class Route:
    """
    A pattern, an event kind and the handler to call when both match.

    Routes are configured by chaining calls on the object returned from
    ``Router.hear``/``Router.add_route``::

        bot.hear("(?i)how are you(.*)").message_handler(how_are_you)

    Once the router is frozen a route can no longer be changed.
    """

    def __init__(
        self,
        pattern: str,
        kind: EventKind = EventKind.MESSAGE,
        handler: Optional[Handler] = None
    ):
        self.pattern = re.compile(pattern)
        self.kind = kind
        self.callback = handler
        self.message_types: frozenset[MessageType] = frozenset()
        self._frozen = False

    def handler(self, handler: Handler) -> "Route":
        """Set the function called with the request context on a match."""
        self._check_mutable()
        self.callback = handler
        return self

    def message_handler(self, handler: Handler) -> "Route":
        """Restrict the route to message events and set its handler."""
        self._check_mutable()
        self.kind = EventKind.MESSAGE
        self.callback = handler
        return self

    def messages(self, *types: MessageType) -> "Route":
        """Only match messages of the given types (DMs, mentions, ...)."""
        self._check_mutable()
        self.kind = EventKind.MESSAGE
        self.message_types = frozenset(types)
        return self

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def match(self, ctx: Context, event: Event) -> Optional[re.Match]:
        """Return the pattern match if this route accepts ``event``, else None."""
        if self.callback is None or event.kind != self.kind:
            return None

        if self.message_types and isinstance(event, MessageEvent):
            bot = bot_from_context(ctx)
            bot_user_id = bot.bot_user_id if bot is not None else ""
            if classify_message(event, bot_user_id) not in self.message_types:
                return None

        return self.pattern.search(getattr(event, "text", "") or "")

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RouteFrozenError(
                f"Route {self.pattern.pattern!r} cannot be changed after the bot started"
            )

    def __repr__(self) -> str:
        return f"Route(pattern={self.pattern.pattern!r}, kind={self.kind.value})"


@dataclass(frozen=True)
class RouteMatch:
    """The route selected for an event and the context to call it with."""
    route: Route
    handler: Handler
    context: Context


class Router:
    """An ordered registry of routes with first-match-wins selection."""

    def __init__(self):
        self.routes: list[Route] = []
        self._frozen = False

    def add_route(
        self,
        pattern: str,
        handler: Optional[Handler] = None,
        kind: EventKind = EventKind.MESSAGE
    ) -> Route:
        """
        Register a route after all previously registered ones.

        Args:
            pattern: Regular expression searched for anywhere in the text.
                Flags such as case-insensitivity go inline, e.g. ``(?i)``.
            handler: Function called with the request context on a match
            kind: Event kind the route applies to

        Returns:
            The new Route, for further configuration
        """
        if self._frozen:
            raise RouteFrozenError("Routes must be registered before the bot starts")

        route = Route(pattern, kind=kind, handler=handler)
        self.routes.append(route)
        logger.debug(f"Registered route {route!r}")
        return route

    def hear(self, pattern: str) -> Route:
        """Register a message route for ``pattern``; set its handler on the result."""
        return self.add_route(pattern)

    def freeze(self) -> None:
        """Prevent any further changes to the registry and its routes."""
        self._frozen = True
        for route in self.routes:
            route.freeze()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def match(self, ctx: Context, event: Event) -> Optional[RouteMatch]:
        """
        Find the first route matching ``event``.

        Capture groups of the winning pattern are added to the returned
        context; ``ctx`` itself is left untouched.

        Returns:
            RouteMatch for the first matching route, or None
        """
        for route in self.routes:
            found = route.match(ctx, event)
            if found is None:
                continue

            matches = PatternMatches(
                text=found.group(0),
                groups=found.groups(),
                named=tuple(found.groupdict().items())
            )
            return RouteMatch(
                route=route,
                handler=route.callback,
                context=add_matches_to_context(ctx, matches)
            )

        return None
