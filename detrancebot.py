import logging
import os
import sys
from typing import List, Mapping, NamedTuple, Optional

import twitchio
from dotenv import load_dotenv

import config
from detection import DEFAULT_MINIMUM_RELATIVE_DISTANCE, LanguageDetector
from relay import DEFAULT_REPLY_PREFIX, DEFAULT_TRIGGER_LANGUAGE, ZERO_WIDTH_JOINER, ChatMessage, Relay
from translation import (
    DEFAULT_ENDPOINT,
    DEFAULT_MODEL,
    DEFAULT_PROMPT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    GroqTranslator,
)

# --- Environment ---
load_dotenv()

# --- Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(levelname)s - %(message)s',
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = ("GROQ_API_KEY", "TWITCH_OAUTH", "TWITCH_BOT_USERNAME", "TWITCH_CHANNEL")

# --- Settings from config.py (with defaults when a name is missing) ---
NATIVE_LANGUAGE = getattr(config, 'NATIVE_LANGUAGE', "en")
TRIGGER_LANGUAGE = getattr(config, 'TRIGGER_LANGUAGE', DEFAULT_TRIGGER_LANGUAGE)
MINIMUM_RELATIVE_DISTANCE = getattr(config, 'MINIMUM_RELATIVE_DISTANCE', DEFAULT_MINIMUM_RELATIVE_DISTANCE)
TEXT_REPLACEMENTS = getattr(config, 'TEXT_REPLACEMENTS', {})
TRANSLATION_ENDPOINT = getattr(config, 'TRANSLATION_ENDPOINT', DEFAULT_ENDPOINT)
TRANSLATION_MODEL = getattr(config, 'TRANSLATION_MODEL', DEFAULT_MODEL)
TRANSLATION_TEMPERATURE = getattr(config, 'TRANSLATION_TEMPERATURE', DEFAULT_TEMPERATURE)
TRANSLATION_TIMEOUT = getattr(config, 'TRANSLATION_TIMEOUT', DEFAULT_TIMEOUT)
TRANSLATION_PROMPT = getattr(config, 'TRANSLATION_PROMPT', DEFAULT_PROMPT)
REPLY_PREFIX = getattr(config, 'REPLY_PREFIX', DEFAULT_REPLY_PREFIX)
MENTION_JOINER = getattr(config, 'MENTION_JOINER', ZERO_WIDTH_JOINER)


class MissingEnvironmentError(ValueError):
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class Settings(NamedTuple):
    groq_api_key: str
    oauth_token: str
    bot_username: str
    channel: str


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read the required secrets and identifiers from the environment."""
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
    if missing:
        raise MissingEnvironmentError(missing)

    token = env["TWITCH_OAUTH"]
    if token.startswith("oauth:"):
        token = token[len("oauth:"):]
    return Settings(
        groq_api_key=env["GROQ_API_KEY"],
        oauth_token=token,
        bot_username=env["TWITCH_BOT_USERNAME"].lower(),
        channel=env["TWITCH_CHANNEL"].lstrip("#").lower(),
    )


def build_relay(settings: Settings) -> Relay:
    detector = LanguageDetector(
        [NATIVE_LANGUAGE, TRIGGER_LANGUAGE],
        minimum_relative_distance=MINIMUM_RELATIVE_DISTANCE,
    )
    translator = GroqTranslator(
        settings.groq_api_key,
        endpoint=TRANSLATION_ENDPOINT,
        model=TRANSLATION_MODEL,
        temperature=TRANSLATION_TEMPERATURE,
        timeout=TRANSLATION_TIMEOUT,
        prompt=TRANSLATION_PROMPT,
    )
    return Relay(
        settings.bot_username,
        detector,
        translator,
        trigger_language=TRIGGER_LANGUAGE,
        replacements=TEXT_REPLACEMENTS,
        reply_prefix=REPLY_PREFIX,
        mention_joiner=MENTION_JOINER,
    )


# --- Bot ---
class Bot(twitchio.Client):
    def __init__(self, settings: Settings, relay: Relay):
        super().__init__(token=settings.oauth_token, initial_channels=[settings.channel])
        self.settings = settings
        self.relay = relay
        logger.info("Bot initialized.")
        logger.info(f"Bot user: {settings.bot_username}")
        logger.info(f"Trigger language: {relay.trigger_language}")

    async def event_ready(self):
        logger.info(f'Logged in | {self.nick}')
        connected_channels = self.connected_channels
        if connected_channels:
            logger.info(f"Connected channels: {[ch.name for ch in connected_channels]}")
        else:
            logger.warning("Not connected to any channel.")
        logger.info("Bot is ready!")

    async def event_message(self, message):
        if message.echo or message.author is None:
            return

        chat_message = ChatMessage(
            login=message.author.name.lower(),
            display_name=message.author.display_name or message.author.name,
            text=message.content,
        )
        reply = await self.relay.handle(chat_message)
        if reply is None:
            return

        channel = self.get_channel(self.settings.channel) or message.channel
        try:
            await channel.send(reply)
        except Exception as e:
            logger.error(f"Failed to post translation to {self.settings.channel}: {e}", exc_info=True)


def main() -> int:
    try:
        settings = load_settings()
    except MissingEnvironmentError as e:
        logger.critical(str(e))
        for name in e.missing:
            logger.critical(f"- {name}")
        return 1

    bot = Bot(settings, build_relay(settings))
    logger.info(f"Connecting to Twitch channel {settings.channel}...")
    try:
        bot.run()
    except Exception as e:
        logger.critical(f"Fatal error while running the bot: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
