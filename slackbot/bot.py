"""
Bot engine: receive loop, self-message suppression and reply helpers.

Handlers are registered with ``hear`` and receive a Context:

    def how_are_you(ctx):
        bot = bot_from_context(ctx)
        evt = message_from_context(ctx)
        bot.reply(evt, "A bit tired. You get it? A bit?", WITH_TYPING)

    bot = Bot.from_token(token)
    bot.hear("(?i)how are you(.*)").message_handler(how_are_you)
    bot.run()
"""

import logging
import threading
import time
from typing import Any, Callable, Optional, Sequence

from slack_sdk.errors import SlackClientError
from slack_sdk.models.attachments import Attachment

from .connection import Connection, RTMConnection
from .context import Context, add_bot_to_context, add_message_to_context
from .models import (
    ConnectedEvent,
    Event,
    EventKind,
    MessageEvent,
    TransportErrorEvent,
)
from .router import Handler, Route, Router
from .typing_delay import estimate_delay

logger = logging.getLogger(__name__)

WITH_TYPING = True
WITHOUT_TYPING = False


class Bot:
    """Dispatches events from a Connection to the routes of a Router."""

    def __init__(
        self,
        connection: Connection,
        router: Optional[Router] = None,
        isolate_handler_errors: bool = True,
        raise_post_errors: bool = False,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.connection = connection
        self.router = router if router is not None else Router()
        self.isolate_handler_errors = isolate_handler_errors
        self.raise_post_errors = raise_post_errors
        self._sleep = sleep
        self._bot_user_id = ""
        self._bot_user_name = ""

    @classmethod
    def from_token(cls, slack_token: str, **kwargs: Any) -> "Bot":
        """Create a bot connected to Slack with ``slack_token``."""
        return cls(RTMConnection(token=slack_token), **kwargs)

    @property
    def bot_user_id(self) -> str:
        return self._bot_user_id

    @property
    def bot_user_name(self) -> str:
        return self._bot_user_name

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def hear(self, pattern: str) -> Route:
        return self.router.hear(pattern)

    def add_route(
        self,
        pattern: str,
        handler: Optional[Handler] = None,
        kind: EventKind = EventKind.MESSAGE
    ) -> Route:
        return self.router.add_route(pattern, handler, kind)

    # ------------------------------------------------------------------
    # Receive loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """
        Listen for incoming events and dispatch them until the platform
        rejects the bot's credentials.
        """
        self.router.freeze()

        threading.Thread(
            target=self.connection.manage_connection,
            name="slackbot-connection",
            daemon=True
        ).start()

        logger.info(f"Bot is running with {len(self.router.routes)} routes")
        while self.handle_event(self.connection.incoming_events.get()):
            pass
        logger.info("Bot stopped")

    def handle_event(self, event: Event) -> bool:
        """
        Process a single inbound event.

        Returns:
            False if the loop must stop, True otherwise
        """
        ctx = add_bot_to_context(Context.background(), self)

        if event.kind is EventKind.CONNECTED:
            self._on_connected(event)
        elif event.kind is EventKind.MESSAGE:
            self._on_message(ctx, event)
        elif event.kind is EventKind.INVALID_AUTH:
            logger.error("Invalid credentials")
            return False
        elif event.kind is EventKind.TRANSPORT_ERROR:
            self._on_transport_error(event)

        return True

    def _on_connected(self, event: ConnectedEvent) -> None:
        logger.info(
            f"Connected as {event.user_name} ({event.user_id}), "
            f"count: {event.connection_count}"
        )
        self._bot_user_id = event.user_id
        self._bot_user_name = event.user_name

    def _on_message(self, ctx: Context, event: MessageEvent) -> None:
        # Slack reports the sender by ID or by name depending on the path
        if event.user and event.user in (self._bot_user_id, self._bot_user_name):
            return

        ctx = add_message_to_context(ctx, event)
        match = self.router.match(ctx, event)
        if match is None:
            logger.debug(f"No route for message in {event.channel}")
            return

        try:
            match.handler(match.context)
        except Exception:
            if not self.isolate_handler_errors:
                raise
            logger.exception(f"Error in handler for {match.route!r}")

    def _on_transport_error(self, event: TransportErrorEvent) -> None:
        logger.error(f"Error {event.error_kind}: {event.message}")

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    def reply(self, event: MessageEvent, text: str, typing: bool = WITHOUT_TYPING) -> None:
        """Reply to a message event over the streaming connection."""
        if typing:
            self.type(event, text)
        self.connection.send_message(text, event.channel)

    def reply_post(self, event: MessageEvent, text: str, typing: bool = WITHOUT_TYPING) -> None:
        """Reply to a message event through the Web API as the bot user."""
        if typing:
            self.type(event, text)
        self._post(
            event.channel,
            text=text,
            as_user=True,
            username=self._bot_user_id,
            link_names=True,
            unfurl_links=True,
            unfurl_media=True
        )

    def reply_with_attachments(
        self,
        event: MessageEvent,
        attachments: Sequence[Attachment | dict],
        typing: bool = WITHOUT_TYPING
    ) -> None:
        """Reply to a message event with message attachments."""
        attachments = list(attachments)
        if typing:
            self.type(event, attachments)
        self._post(
            event.channel,
            attachments=attachments,
            as_user=True,
            username=self._bot_user_id,
            link_names=True
        )

    def type(self, event: MessageEvent, payload: Any) -> None:
        """Send a typing indicator and wait as long as typing ``payload`` would take."""
        delay = estimate_delay(payload)
        self.connection.send_typing(event.channel)
        self._sleep(delay)

    def _post(self, channel: str, **params: Any) -> None:
        try:
            self.connection.post_message(channel, **params)
        except (SlackClientError, OSError) as e:
            if self.raise_post_errors:
                raise
            logger.warning(f"Failed to post message to {channel}: {e}")
