# config.py

# --- Language settings ---
NATIVE_LANGUAGE = "en"              # translations are written in this language
TRIGGER_LANGUAGE = "de"             # messages detected as this language get translated
MINIMUM_RELATIVE_DISTANCE = 0.80    # top language must beat the runner-up by this much

# --- Text replacements (case sensitive, applied before detection and translation) ---
TEXT_REPLACEMENTS = {
    "fuchsgewand": "foxguy",
    "Fuchsgewand": "Foxguy",
    "FuchsGewand": "FoxGuy",
}

# --- Translation API (key is read from GROQ_API_KEY) ---
TRANSLATION_ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"
TRANSLATION_MODEL = "llama-3.1-8b-instant"
TRANSLATION_TEMPERATURE = 0.2
TRANSLATION_TIMEOUT = 10.0          # seconds
TRANSLATION_PROMPT = "Translate the following German text to English. Respond only with the translation: {text}"

# --- Reply format ---
REPLY_PREFIX = "/me 🤖"
MENTION_JOINER = "\u200d"           # zero-width joiner, keeps the @name from pinging the user

# --- Twitch (set these as environment variables or in .env) ---
# GROQ_API_KEY = "your_groq_api_key"
# TWITCH_OAUTH = "oauth:your_token"
# TWITCH_BOT_USERNAME = "your_bot_name"
# TWITCH_CHANNEL = "your_channel_name"
