import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.1-8b-instant"
DEFAULT_PROMPT = "Translate the following German text to English. Respond only with the translation: {text}"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TIMEOUT = 10.0  # seconds


class TranslationError(Exception):
    """The translation API did not return a usable translation."""


class GroqTranslator:
    """Single-attempt client for the Groq (OpenAI compatible) chat completions API."""

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT,
        prompt: str = DEFAULT_PROMPT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.prompt = prompt
        self._transport = transport

    def build_request(self, text: str) -> Dict[str, Any]:
        return {
            "messages": [{"role": "user", "content": self.prompt.format(text=text)}],
            "model": self.model,
            "temperature": self.temperature,
        }

    async def translate(self, text: str) -> str:
        """Translate text and return the first choice, trimmed. Raises TranslationError on any failure."""
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=self.build_request(text), headers=headers)
        except httpx.TimeoutException as e:
            raise TranslationError(f"API request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TranslationError(f"API request failed: {e}") from e

        if response.status_code != 200:
            raise TranslationError(f"API request failed with status: {response.status_code} {response.reason_phrase}")

        try:
            data = response.json()
        except ValueError as e:
            raise TranslationError(f"Could not decode API response: {e}") from e

        return parse_response(data)


def parse_response(data: Any) -> str:
    if not isinstance(data, dict):
        raise TranslationError("Malformed API response: expected a JSON object")

    error = data.get("error")
    if isinstance(error, dict):
        error_message = error.get("message")
    else:
        error_message = error
    if error_message:
        raise TranslationError(f"API error: {error_message}")

    choices = data.get("choices") or []
    if not choices:
        raise TranslationError("no translations received")

    try:
        content = choices[0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise TranslationError("Malformed API response: first choice has no message content") from None
    if not isinstance(content, str):
        raise TranslationError("Malformed API response: message content is not text")

    translation = content.strip()
    if not translation:
        raise TranslationError("empty translation received")
    logger.debug(f"Translation received ({len(choices)} choice(s)): {translation}")
    return translation
