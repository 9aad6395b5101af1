"""
Greetings - sample handler package.

Answers "how are you" with a plain reply and "what do you do" with an
attachment card.
"""

import logging

from slack_sdk.models.attachments import Attachment

from slackbot import (
    WITH_TYPING,
    Bot,
    Context,
    MessageType,
    bot_from_context,
    matches_from_context,
    message_from_context,
)

logger = logging.getLogger(__name__)

CARD_TEXT = "Beep Beep Boop is a ridiculously simple hosting platform for your Slackbots."


def how_are_you(ctx: Context) -> None:
    bot = bot_from_context(ctx)
    evt = message_from_context(ctx)

    rest = (matches_from_context(ctx).group(1) or "").strip(" ?!.")
    if rest:
        logger.info(f"Asked how we are {rest}")

    bot.reply(evt, "A bit tired. You get it? A bit?", WITH_TYPING)


def what_do_you_do(ctx: Context) -> None:
    bot = bot_from_context(ctx)
    evt = message_from_context(ctx)

    attachment = Attachment(
        pretext="We bring bots to life. :sunglasses: :thumbsup:",
        title="Host, deploy and share your bot in seconds.",
        title_link="https://beepboophq.com/",
        text=CARD_TEXT,
        fallback=CARD_TEXT,
        image_url="https://storage.googleapis.com/beepboophq/_assets/bot-1.22f6fb.png",
        color="#7CD197",
    )
    bot.reply_with_attachments(evt, [attachment], WITH_TYPING)


def hello(ctx: Context) -> None:
    bot = bot_from_context(ctx)
    bot.reply_post(message_from_context(ctx), f"Hi, I'm {bot.bot_user_name}!")


def register_routes(bot: Bot) -> None:
    """Register the greeting routes, most specific first."""
    bot.hear("(?i)how are you(.*)").message_handler(how_are_you)
    bot.hear("(?i)what do you do").message_handler(what_do_you_do)
    bot.hear("(?i)\\b(hi|hello)\\b").messages(
        MessageType.DIRECT_MESSAGE, MessageType.DIRECT_MENTION
    ).handler(hello)
