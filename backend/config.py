"""ChefSpeak configuration — integrates with shared constants.py."""

import os

from constants import DATA_DIR, LANGUAGE_TAGS

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
VERSION = "0.1.0"

# Chat completion (OpenAI-compatible endpoint)
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")
OPENAI_TEMPERATURE = float(os.environ.get("OPENAI_TEMPERATURE", "0.7"))
CHAT_TIMEOUT_S = float(os.environ.get("CHAT_TIMEOUT_S", "30"))

SYSTEM_PROMPT = (
    "You are a multilingual professional chef assistant. Always give clear, "
    "numbered steps in the user's preferred language: {language}."
)
USER_PROMPT = (
    'Give me a numbered list of clear step-by-step instructions only (no ingredients) '
    'for "{query}". Use one list with Step 1, Step 2, ... format. Max 15 steps. '
    'Respond only in {language}.'
)

# Profiles
PROFILE_STORE_PATH = os.environ.get("PROFILE_STORE_PATH", str(DATA_DIR / "profiles.json"))

# Profile languages accepted by the API
SUPPORTED_LANGUAGES = list(LANGUAGE_TAGS)
