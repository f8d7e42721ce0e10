"""
ChefSpeak — Shared Constants
All modules import from here. Single source of truth.
"""

import os
from pathlib import Path

# === Project Paths ===
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = Path(os.environ.get(
    "CHEFSPEAK_DATA_DIR",
    str(Path.home() / ".chefspeak"),
))
FRONTEND_DIR = PROJECT_ROOT / "frontend"

# === Languages ===
# Profile language name -> BCP-47 tag used for recognition / synthesis
LANGUAGE_TAGS = {
    "English": "en-IN",
    "Hindi": "hi-IN",
    "Telugu": "te-IN",
    "Tamil": "ta-IN",
}
DEFAULT_LANGUAGE = "English"

# Navigation keywords are English, and en-US is the most reliable
# recognizer/synthesizer locale across browsers.
COMMAND_LANGUAGE_TAG = os.environ.get("COMMAND_LANGUAGE", "en-US")

# === Recipe Steps ===
MAX_STEPS = int(os.environ.get("MAX_STEPS", 0))  # 0 keeps every step
STEP_STYLE_VERBATIM = "step"       # "Step N: text" kept as-is
STEP_STYLE_NUMBERED = "numbered"   # "N." / "N)" lines

# === Turn-taking Timing (seconds) ===
SPEAK_CANCEL_DELAY_S = 0.25        # gap between cancel() and the next speak()
RECOGNITION_RESTART_DELAY_S = 0.4  # settle after speech ends before listening again

# === Speech ===
SPEECH_RATE = float(os.environ.get("SPEECH_RATE", 1.0))
