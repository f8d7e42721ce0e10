"""
Speech output.
Serialized cancel-then-speak narration, plus optional server-side Google Cloud TTS.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from constants import SPEECH_RATE
from voice.config import (
    GOOGLE_TTS_API_KEY,
    GOOGLE_TTS_URL,
    GOOGLE_TTS_TIMEOUT_S,
    TTS_AUDIO_CONFIG,
    CANCEL_DELAY_S,
)

logger = logging.getLogger(__name__)


class TTSError(RuntimeError):
    """Cloud synthesis failed (network, HTTP status, or malformed reply)."""


@dataclass
class SpokenUtterance:
    id: int
    text: str
    language: str
    rate: float = SPEECH_RATE
    audio_base64: Optional[str] = None  # set in server TTS mode

    def to_message(self) -> dict:
        return {
            "type": "speak",
            "id": self.id,
            "text": self.text,
            "language": self.language,
            "rate": self.rate,
            "audio_base64": self.audio_base64,
        }


class CloudTTS:
    """Google Cloud Text-to-Speech over REST. Disabled when no API key is configured."""

    def __init__(self, api_key: str | None = None, session: requests.Session | None = None):
        self.api_key = api_key if api_key is not None else GOOGLE_TTS_API_KEY
        self._http = session or requests.Session()
        if not self.enabled:
            logger.warning("GOOGLE_TTS_API_KEY not set. Server TTS disabled, browser voice only.")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def synthesize(self, text: str, language: str, rate: float = SPEECH_RATE) -> bytes:
        """Return MP3 bytes for text. Raises TTSError on any failure."""
        if not self.enabled:
            raise TTSError("Cloud TTS is not configured")

        payload = {
            "input": {"text": text},
            "voice": {"languageCode": language},
            "audioConfig": {**TTS_AUDIO_CONFIG, "speakingRate": rate},
        }
        try:
            resp = self._http.post(
                GOOGLE_TTS_URL,
                params={"key": self.api_key},
                json=payload,
                timeout=GOOGLE_TTS_TIMEOUT_S,
            )
        except requests.RequestException as e:
            raise TTSError(f"TTS request failed: {e}") from e

        if resp.status_code != 200:
            raise TTSError(f"Google TTS error {resp.status_code}: {resp.text[:200]}")

        try:
            audio_b64 = resp.json()["audioContent"]
            return base64.b64decode(audio_b64)
        except (ValueError, KeyError, TypeError) as e:
            raise TTSError(f"Malformed TTS reply: {e}") from e

    def synthesize_base64(self, text: str, language: str, rate: float = SPEECH_RATE) -> str | None:
        """Like synthesize(), but base64 text for the WebSocket; None on failure."""
        try:
            audio = self.synthesize(text, language, rate)
        except TTSError as e:
            logger.error(f"TTS synthesis failed: {e}")
            return None
        return base64.b64encode(audio).decode("utf-8")


class Narrator:
    """
    Issues speech one utterance at a time.

    Speech engines are asynchronous: a cancel() followed immediately by
    speak() can silently drop the new utterance. say() therefore cancels
    whatever is playing or queued (including a delayed speak that has not
    been issued yet), waits cancel_delay, and only then speaks. At most one
    utterance is ever playing or queued.

    The synthesizer is any object with `speaking`, `pending`,
    `speak(SpokenUtterance)` and `cancel()`.
    """

    def __init__(
        self,
        synthesizer,
        cancel_delay: float = CANCEL_DELAY_S,
        tts: CloudTTS | None = None,
    ):
        self.synth = synthesizer
        self.cancel_delay = cancel_delay
        self.tts = tts
        self.current: SpokenUtterance | None = None
        self._task: asyncio.Task | None = None
        self._next_id = 0

    @property
    def busy(self) -> bool:
        """True while a speak is scheduled or the engine is speaking/pending."""
        return self.scheduled or bool(self.synth.speaking) or bool(self.synth.pending)

    def say(
        self,
        resolve_text: Callable[[], str | None],
        language: str,
        rate: float = SPEECH_RATE,
    ) -> asyncio.Task:
        """
        Schedule one utterance. resolve_text is called right before the
        speak is issued, so it sees the latest session state.
        Must be called from within the running event loop.
        """
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._speak_after_cancel(resolve_text, language, rate)
        )
        return self._task

    def cancel(self) -> None:
        """Drop the scheduled speak (if any) and silence the engine."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.current = None
        if self.synth.speaking or self.synth.pending:
            logger.debug("Cancelling ongoing speech")
            self.synth.cancel()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def scheduled(self) -> bool:
        """True while a speak is waiting out the cancel delay."""
        return self._task is not None and not self._task.done()

    def is_current(self, utterance_id=None) -> bool:
        """Whether an event for utterance_id belongs to the latest issued utterance."""
        if self.current is None:
            return False
        return utterance_id is None or self.current.id == utterance_id

    async def _speak_after_cancel(
        self,
        resolve_text: Callable[[], str | None],
        language: str,
        rate: float,
    ) -> SpokenUtterance | None:
        await asyncio.sleep(self.cancel_delay)

        text = resolve_text()
        if not text:
            logger.warning("No step text to speak")
            return None

        self._next_id += 1
        utterance = SpokenUtterance(id=self._next_id, text=text, language=language, rate=rate)
        if self.tts is not None and self.tts.enabled:
            utterance.audio_base64 = await asyncio.to_thread(
                self.tts.synthesize_base64, text, language, rate
            )

        self.current = utterance
        logger.info(f"Speaking [{utterance.id}]: {text}")
        self.synth.speak(utterance)
        return utterance
