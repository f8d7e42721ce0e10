"""
Profile service — stored language preference per signed-in user.
Backed by a small JSON file: {"<user_id>": {"language": "Hindi"}, ...}
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from constants import LANGUAGE_TAGS, DEFAULT_LANGUAGE
from ..config import PROFILE_STORE_PATH

logger = logging.getLogger(__name__)


class UnsupportedLanguageError(ValueError):
    pass


class ProfileService:
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or PROFILE_STORE_PATH)
        self._lock = threading.Lock()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read profiles from {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_language(self, user_id: str | None) -> str:
        """Return the user's language name, or the default when unknown."""
        if not user_id:
            return DEFAULT_LANGUAGE
        with self._lock:
            profile = self._load().get(user_id) or {}
        language = profile.get("language") if isinstance(profile, dict) else None
        if language not in LANGUAGE_TAGS:
            return DEFAULT_LANGUAGE
        return language

    def set_language(self, user_id: str, language: str) -> str:
        if language not in LANGUAGE_TAGS:
            raise UnsupportedLanguageError(f"Unsupported language: {language}")
        with self._lock:
            data = self._load()
            profile = data.get(user_id)
            if not isinstance(profile, dict):
                profile = {}
            profile["language"] = language
            data[user_id] = profile
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        logger.info(f"Language for {user_id} set to {language}")
        return language
