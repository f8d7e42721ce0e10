"""
Voice layer configuration.
Cloud TTS settings, turn-taking delays, and user-facing feedback messages.
"""

import os

from constants import (
    SPEAK_CANCEL_DELAY_S,
    RECOGNITION_RESTART_DELAY_S,
    SPEECH_RATE,
)

# === Speech output mode ===
# "client": the browser speaks the text with speechSynthesis
# "server": synthesize here with Google Cloud TTS and ship base64 MP3 to the page
TTS_MODE = os.environ.get("TTS_MODE", "client")

# === Google Cloud Text-to-Speech ===
GOOGLE_TTS_API_KEY = os.environ.get("GOOGLE_TTS_API_KEY", "")
GOOGLE_TTS_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"
GOOGLE_TTS_TIMEOUT_S = 10

TTS_AUDIO_CONFIG = {
    "audioEncoding": "MP3",
    "speakingRate": SPEECH_RATE,
}

# === Turn-taking (overridable for slow speech engines) ===
CANCEL_DELAY_S = float(os.environ.get("SPEAK_CANCEL_DELAY_S", SPEAK_CANCEL_DELAY_S))
RESTART_DELAY_S = float(os.environ.get("RECOGNITION_RESTART_DELAY_S", RECOGNITION_RESTART_DELAY_S))

# === Recognizer settings ===
RECOGNITION_SETTINGS = {
    "interim_results": False,
    "max_alternatives": 1,
}

# === Feedback messages (error kind -> text shown to the user) ===
FEEDBACK_MESSAGES = {
    "capability_missing": "Speech recognition is not supported in this browser.",
    "recognition_error": "Speech recognition error: {detail}",
    "chat_failed": "Something went wrong while fetching the recipe.",
    "no_steps_extracted": "Could not extract steps from the assistant's reply.",
    "no_steps": "No recipe loaded yet. Ask for a dish first.",
}
