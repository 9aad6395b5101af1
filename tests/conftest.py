"""Shared fixtures for the dispatcher tests."""

import threading
from typing import Any

import pytest

from slackbot import Bot, Connection, MessageEvent


class FakeConnection(Connection):
    """Connection that records outbound calls instead of talking to Slack."""

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []
        self.managed = threading.Event()

    def manage_connection(self) -> None:
        self.managed.set()

    def send_message(self, text: str, channel: str) -> None:
        self.calls.append(("message", channel, text))

    def send_typing(self, channel: str) -> None:
        self.calls.append(("typing", channel))

    def post_message(self, channel: str, **params: Any) -> None:
        self.calls.append(("post", channel, params))


def make_message(text: str, user: str = "U999", channel: str = "C100") -> MessageEvent:
    return MessageEvent(channel=channel, user=user, text=text, raw={"type": "message", "text": text})


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays passed to the bot's sleep function."""
    return []


@pytest.fixture
def bot(connection, sleeps) -> Bot:
    def sleep(seconds: float) -> None:
        sleeps.append(seconds)
        connection.calls.append(("sleep", seconds))

    return Bot(connection, sleep=sleep)
