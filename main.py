"""
Slack Bot - Main Entry Point

Starts a bot that:
- Connects to Slack over the real-time messaging API
- Loads route handlers from handlers/<name>/routes.py
- Dispatches incoming messages to the first matching route
"""

import os
import sys
import json
import argparse
import logging
from pathlib import Path
from dotenv import load_dotenv

from slackbot import Bot, PluginLoader

BOT_DIR = Path(__file__).parent

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Pattern-routed Slack bot")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/greetings.json)"
    )
    return parser.parse_args()


def load_config(config_arg: str | None) -> dict:
    """Load the optional bot config JSON file."""
    if not config_arg:
        return {}

    config_path = BOT_DIR / config_arg
    with open(config_path) as f:
        config = json.load(f)
    logger.info(f"Loaded bot config: {config.get('name', config_arg)}")
    return config


def load_environment(env_file: str | None = None):
    """Load and validate environment variables."""
    if env_file:
        env_path = BOT_DIR / env_file
    else:
        env_path = BOT_DIR / ".env"
    load_dotenv(env_path)

    required_vars = ["SLACK_BOT_TOKEN"]
    missing = [var for var in required_vars if not os.getenv(var)]

    if missing:
        logger.error(
            f"Missing required environment variables: {', '.join(missing)}"
        )
        sys.exit(1)


def main():
    """Start the bot and block until Slack rejects its credentials."""
    args = parse_args()
    config = load_config(args.config)

    if "log_level" in config:
        logging.getLogger().setLevel(config["log_level"].upper())

    load_environment(config.get("env_file"))

    bot = Bot.from_token(
        os.environ["SLACK_BOT_TOKEN"],
        raise_post_errors=config.get("raise_post_errors", False)
    )

    loader = PluginLoader(allowed_handlers=config.get("handlers"))
    loaded = loader.load_all(bot)
    if not loaded:
        logger.error("No handlers loaded, nothing to dispatch to")
        sys.exit(1)

    logger.info("Starting bot... Press Ctrl+C to stop.")
    try:
        bot.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
