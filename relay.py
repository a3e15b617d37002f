import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from translation import TranslationError

logger = logging.getLogger(__name__)

ZERO_WIDTH_JOINER = "\u200d"
DEFAULT_REPLY_PREFIX = "/me 🤖"
DEFAULT_TRIGGER_LANGUAGE = "de"


@dataclass(frozen=True)
class ChatMessage:
    login: str          # lowercase login name
    display_name: str
    text: str


def build_replacer(replacements: Mapping[str, str]):
    """Compile literal replacements into a single-pass substitution function."""
    if not replacements:
        return lambda text: text
    # Longest keys first.
    keys = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return lambda text: pattern.sub(lambda match: replacements[match.group(0)], text)


def normalize_text(text: str, replacements: Mapping[str, str]) -> str:
    return build_replacer(replacements)(text)



def format_mention(display_name: str, joiner: str = ZERO_WIDTH_JOINER) -> str:
    """@-mention that shows the name without triggering a Twitch mention notification."""
    if not display_name:
        return "@"
    return f"@{display_name[0]}{joiner}{display_name[1:]}"


def format_reply(
    display_name: str,
    translation: str,
    prefix: str = DEFAULT_REPLY_PREFIX,
    joiner: str = ZERO_WIDTH_JOINER,
) -> str:
    return f"{prefix} {format_mention(display_name, joiner)}: {translation}"


def is_single_word(text: str) -> bool:
    # Only decides whether to skip; the text passed on is left unstripped.
    return len(text.split()) < 2


class Relay:
    """Decides per chat message whether to translate it, and builds the reply.

    The detector needs a ``detect_language_of(text) -> Optional[str]`` method and
    the translator an async ``translate(text) -> str`` that raises
    ``TranslationError``. Neither is mutated, so concurrent calls to
    :meth:`handle` are safe.
    """

    def __init__(
        self,
        bot_username: str,
        detector,
        translator,
        *,
        trigger_language: str = DEFAULT_TRIGGER_LANGUAGE,
        replacements: Optional[Mapping[str, str]] = None,
        reply_prefix: str = DEFAULT_REPLY_PREFIX,
        mention_joiner: str = ZERO_WIDTH_JOINER,
    ):
        self.bot_username = bot_username.lower()
        self.detector = detector
        self.translator = translator
        self.trigger_language = trigger_language.lower()
        self.reply_prefix = reply_prefix
        self.mention_joiner = mention_joiner
        self._normalize = build_replacer(dict(replacements or {}))

    def normalize(self, text: str) -> str:
        return self._normalize(text)

    async def handle(self, message: ChatMessage) -> Optional[str]:
        """Return the reply to post for this message, or None when nothing should be posted."""
        if message.login == self.bot_username:
            return None

        if is_single_word(message.text):
            return None

        text = self.normalize(message.text)
        logger.info(f"{message.display_name}: {text}")

        language = self.detector.detect_language_of(text)
        if language is None:
            logger.debug(f"No confident language match, skipping: {text}")
            return None
        logger.info(f"Language detected: {language.upper()}")

        if language.lower() != self.trigger_language:
            return None

        try:
            translation = await self.translator.translate(text)
        except TranslationError as e:
            logger.error(f"Translation failed: {e}")
            return None
        logger.info(f"Translation: {translation}")

        return format_reply(message.display_name or message.login, translation, self.reply_prefix, self.mention_joiner)
