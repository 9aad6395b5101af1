"""Tests for ordered route matching."""

import re
from unittest.mock import MagicMock

import pytest

from slackbot import (
    Context,
    EventKind,
    MessageType,
    OtherEvent,
    RouteFrozenError,
    Router,
    add_bot_to_context,
    matches_from_context,
    message_from_context,
    add_message_to_context,
)
from slackbot.router import classify_message
from conftest import make_message


def _ctx(bot_user_id: str = "UBOT") -> Context:
    bot = MagicMock()
    bot.bot_user_id = bot_user_id
    return add_bot_to_context(Context.background(), bot)


class TestMatch:
    def test_inline_case_insensitive_search(self):
        router = Router()
        handler = MagicMock()
        router.hear("(?i)how are you").message_handler(handler)

        match = router.match(_ctx(), make_message("How ARE you today?"))

        assert match is not None
        match.handler(match.context)
        handler.assert_called_once_with(match.context)

    def test_no_match_returns_none(self):
        router = Router()
        router.hear("goodbye").message_handler(MagicMock())
        assert router.match(_ctx(), make_message("hello")) is None

    def test_registration_order_wins_over_specificity(self):
        router = Router()
        first, second = MagicMock(), MagicMock()
        first_route = router.hear("hi").message_handler(first)
        router.hear("hi there").message_handler(second)

        match = router.match(_ctx(), make_message("hi there"))

        assert match.route is first_route
        assert match.handler is first

    def test_later_route_used_when_earlier_does_not_match(self):
        router = Router()
        router.hear("^bye").message_handler(MagicMock())
        second = router.hear("there").message_handler(MagicMock())

        assert router.match(_ctx(), make_message("hi there")).route is second

    def test_kind_must_match(self):
        router = Router()
        router.add_route("", handler=MagicMock(), kind=EventKind.OTHER)

        assert router.match(_ctx(), make_message("anything")) is None
        assert router.match(_ctx(), OtherEvent(type="presence_change")) is not None

    def test_route_without_handler_is_skipped(self):
        router = Router()
        router.hear("hello")
        fallback = router.hear("hel").message_handler(MagicMock())

        assert router.match(_ctx(), make_message("hello")).route is fallback

    def test_captures_are_added_to_result_context(self):
        router = Router()
        router.hear(r"(?i)how are you(?P<rest>.*)").message_handler(MagicMock())
        evt = make_message("How are you doing?")
        ctx = add_message_to_context(_ctx(), evt)

        match = router.match(ctx, evt)

        matches = matches_from_context(match.context)
        assert matches.group(0) == "How are you doing?"
        assert matches.group(1) == " doing?"
        assert matches.get("rest") == " doing?"
        # earlier bindings survive, the input context is untouched
        assert message_from_context(match.context) is evt
        assert matches_from_context(ctx).groups == ()

    def test_invalid_pattern_fails_at_registration(self):
        with pytest.raises(re.error):
            Router().hear("(unclosed")


class TestMessageTypes:
    @pytest.mark.parametrize("channel,text,expected", [
        ("D123", "hi", MessageType.DIRECT_MESSAGE),
        ("C123", "<@UBOT> hi", MessageType.DIRECT_MENTION),
        ("C123", "hi <@UBOT>", MessageType.MENTION),
        ("C123", "hi everyone", MessageType.AMBIENT),
    ])
    def test_classify(self, channel, text, expected):
        assert classify_message(make_message(text, channel=channel), "UBOT") is expected

    def test_unknown_bot_id_is_ambient(self):
        assert classify_message(make_message("<@UBOT> hi"), "") is MessageType.AMBIENT

    def test_route_restricted_to_direct_messages(self):
        router = Router()
        route = router.hear("hi").messages(MessageType.DIRECT_MESSAGE).handler(MagicMock())

        assert router.match(_ctx(), make_message("hi", channel="C1")) is None
        assert router.match(_ctx(), make_message("hi", channel="D1")).route is route

    def test_mentions_use_bot_id_from_context(self):
        router = Router()
        router.hear("hi").messages(MessageType.DIRECT_MENTION).handler(MagicMock())

        assert router.match(_ctx("UBOT"), make_message("<@UBOT> hi")) is not None
        assert router.match(_ctx("UOTHER"), make_message("<@UBOT> hi")) is None


class TestFreeze:
    def test_add_route_after_freeze(self):
        router = Router()
        router.freeze()
        with pytest.raises(RouteFrozenError):
            router.hear("late")

    def test_route_configuration_after_freeze(self):
        router = Router()
        route = router.hear("hi")
        router.freeze()

        assert route.frozen
        with pytest.raises(RouteFrozenError):
            route.message_handler(MagicMock())
        with pytest.raises(RouteFrozenError):
            route.messages(MessageType.AMBIENT)

    def test_matching_still_works_when_frozen(self):
        router = Router()
        router.hear("hi").message_handler(MagicMock())
        router.freeze()
        assert router.match(_ctx(), make_message("hi")) is not None
