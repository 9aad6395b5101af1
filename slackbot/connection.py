"""
Connection to the Slack real-time messaging API.

The bot engine only depends on the Connection interface: a queue of inbound
events plus three outbound send operations. RTMConnection implements it on
top of slack_sdk's RTM and Web API clients.
"""

import itertools
import logging
import queue
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.rtm_v2 import RTMClient

from .models import (
    ConnectedEvent,
    Event,
    InvalidAuthEvent,
    MessageEvent,
    OtherEvent,
    TransportErrorEvent,
)

logger = logging.getLogger(__name__)

AUTH_ERRORS = {"invalid_auth", "not_authed", "account_inactive", "token_revoked"}
RETRY_DELAY = 5  # seconds


def event_from_payload(payload: dict[str, Any]) -> Event:
    """Convert a raw RTM payload into a dispatcher event."""
    event_type = payload.get("type")

    if event_type == "message":
        return MessageEvent(
            channel=payload.get("channel", ""),
            user=payload.get("user") or payload.get("username") or "",
            text=payload.get("text") or "",
            raw=payload,
            subtype=payload.get("subtype"),
            bot_id=payload.get("bot_id")
        )

    if event_type == "error":
        error = payload.get("error") or {}
        return TransportErrorEvent(
            error_kind=f"rtm_error_{error.get('code', 'unknown')}",
            message=error.get("msg", "")
        )

    return OtherEvent(type=event_type, raw=payload)


class Connection(ABC):
    """
    Abstract connection the bot reads events from and replies through.

    Implementations push events onto ``incoming_events`` from
    ``manage_connection``, which the bot runs once in a background thread.
    """

    def __init__(self):
        self.incoming_events: "queue.Queue[Event]" = queue.Queue()

    @abstractmethod
    def manage_connection(self) -> None:
        """Connect, keep the connection alive and feed ``incoming_events``."""
        pass

    @abstractmethod
    def send_message(self, text: str, channel: str) -> None:
        """Send a plain message over the streaming connection."""
        pass

    @abstractmethod
    def send_typing(self, channel: str) -> None:
        """Send a typing indicator over the streaming connection."""
        pass

    @abstractmethod
    def post_message(self, channel: str, **params: Any) -> None:
        """Post a message through the request/response API."""
        pass


class RTMConnection(Connection):
    """Connection backed by slack_sdk's RTMClient and WebClient."""

    def __init__(
        self,
        token: Optional[str] = None,
        web_client: Optional[WebClient] = None,
        rtm_client: Optional[RTMClient] = None
    ):
        super().__init__()
        self.web_client = web_client if web_client is not None else WebClient(token=token)
        self.rtm: Optional[RTMClient] = None
        self.user_id = ""
        self.user_name = ""
        self.connection_count = 0
        self._message_ids = itertools.count(1)

        if rtm_client is not None:
            self._attach(rtm_client)

    def rtm_client(self) -> RTMClient:
        """
        Return the RTM client, creating it on first use.

        A single listener worker keeps events in the order they arrived.
        """
        if self.rtm is None:
            self._attach(RTMClient(web_client=self.web_client, concurrency=1))
        return self.rtm

    def _attach(self, rtm: RTMClient) -> None:
        def on_event(client: RTMClient, event: dict):
            self._on_event(event)

        rtm.on("*")(on_event)
        self.rtm = rtm

    def manage_connection(self) -> None:
        """
        Authenticate and run the RTM session.

        Rejected credentials end up as an InvalidAuthEvent and stop any
        further attempts. Other failures are reported as transport errors and
        retried after RETRY_DELAY seconds.
        """
        while True:
            try:
                identity = self.web_client.auth_test()
            except SlackApiError as e:
                error = e.response.get("error", "")
                if error in AUTH_ERRORS:
                    logger.error(f"Slack rejected the token: {error}")
                    self.incoming_events.put(InvalidAuthEvent(error=error))
                    return
                self._report_error("auth_test", e)
                continue
            except (SlackClientError, OSError) as e:
                self._report_error("auth_test", e)
                continue

            self.user_id = identity.get("user_id", "")
            self.user_name = identity.get("user", "")

            try:
                self.rtm_client().start()
            except (SlackClientError, OSError) as e:
                self._report_error("rtm", e)
            except Exception as e:
                logger.exception("RTM session failed")
                self._report_error("rtm", e)

    def send_message(self, text: str, channel: str) -> None:
        self.rtm_client().send({
            "id": next(self._message_ids),
            "type": "message",
            "channel": channel,
            "text": text
        })

    def send_typing(self, channel: str) -> None:
        self.rtm_client().send({
            "id": next(self._message_ids),
            "type": "typing",
            "channel": channel
        })

    def post_message(self, channel: str, **params: Any) -> None:
        self.web_client.chat_postMessage(channel=channel, **params)

    def _on_event(self, payload: dict) -> None:
        if payload.get("type") == "hello":
            self.connection_count += 1
            self.incoming_events.put(ConnectedEvent(
                user_id=self.user_id,
                user_name=self.user_name,
                connection_count=self.connection_count
            ))
            return

        self.incoming_events.put(event_from_payload(payload))

    def _report_error(self, error_kind: str, error: Exception) -> None:
        logger.warning(f"Connection problem ({error_kind}), retrying in {RETRY_DELAY}s: {error}")
        self.incoming_events.put(TransportErrorEvent(error_kind=error_kind, message=str(error)))
        time.sleep(RETRY_DELAY)
