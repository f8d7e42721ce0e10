"""Browser bridge — adapts the page's Web Speech APIs to the turn controller.

The browser owns the microphone and the speaker. The controller talks to a
BrowserRecognizer / BrowserSynthesizer pair that turn calls into outgoing
WebSocket messages; incoming browser events are dispatched back through
SessionBridge.handle().
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .state_machine import SpeechTurnController

logger = logging.getLogger(__name__)


class BrowserRecognizer:
    def __init__(self, send: Callable[[dict], None]):
        self._send = send
        self.available = False  # set from the page's "hello"

    def start(self, language: str, interim_results: bool = False, max_alternatives: int = 1) -> None:
        self._send({
            "type": "start_recognition",
            "language": language,
            "interim_results": interim_results,
            "max_alternatives": max_alternatives,
        })

    def abort(self) -> None:
        self._send({"type": "abort_recognition"})


class BrowserSynthesizer:
    """Mirrors speechSynthesis.speaking / .pending from the page's lifecycle events."""

    def __init__(self, send: Callable[[dict], None]):
        self._send = send
        self.speaking = False
        self.pending = False
        self._active_id = None

    def speak(self, utterance) -> None:
        self._active_id = utterance.id
        self.pending = True
        self._send(utterance.to_message())

    def cancel(self) -> None:
        self._active_id = None
        self.speaking = False
        self.pending = False
        self._send({"type": "cancel_speech"})

    def mark_started(self, utterance_id) -> None:
        if utterance_id == self._active_id:
            self.pending = False
            self.speaking = True

    def mark_ended(self, utterance_id) -> None:
        if utterance_id == self._active_id:
            self.pending = False
            self.speaking = False
            self._active_id = None


class SessionBridge:
    """
    One per WebSocket connection: a controller plus an outbox of messages
    for the page. Outgoing messages are queued synchronously and drained by
    the connection's sender task.
    """

    def __init__(self, chat, language: str, tts=None, user_id: str | None = None, **controller_kwargs):
        self.user_id = user_id
        self.outbox: asyncio.Queue[dict] = asyncio.Queue()
        self.recognizer = BrowserRecognizer(self.send)
        self.synthesizer = BrowserSynthesizer(self.send)
        self.controller = SpeechTurnController(
            self.recognizer,
            self.synthesizer,
            chat,
            report_error=self._on_error,
            on_change=self._on_change,
            language=language,
            tts=tts,
            **controller_kwargs,
        )

    def send(self, message: dict) -> None:
        self.outbox.put_nowait(message)

    def _on_error(self, kind: str, message: str) -> None:
        self.send({"type": "error", "kind": kind, "message": message})

    def _on_change(self, snapshot: dict) -> None:
        self.send({"type": "state_update", **snapshot})

    def handle(self, message: dict) -> None:
        """Dispatch one message from the page."""
        msg_type = message.get("type", "")
        ctl = self.controller

        if msg_type == "hello":
            self.recognizer.available = bool(message.get("speech_recognition", False))
            self.send({"type": "state_update", **ctl.snapshot()})

        elif msg_type == "start":
            ctl.start_listening()

        elif msg_type == "abort":
            ctl.abort()

        elif msg_type == "recognition_result":
            ctl.on_recognition_result(message.get("text", ""))

        elif msg_type == "recognition_end":
            ctl.on_recognition_end()

        elif msg_type == "recognition_error":
            ctl.on_recognition_error(message.get("error", "unknown"))

        elif msg_type == "speech_start":
            utterance_id = message.get("id")
            self.synthesizer.mark_started(utterance_id)
            ctl.on_speech_start(utterance_id)

        elif msg_type == "speech_end":
            utterance_id = message.get("id")
            self.synthesizer.mark_ended(utterance_id)
            ctl.on_speech_end(utterance_id)

        elif msg_type == "speak_step":
            try:
                index = int(message.get("index", 0))
            except (TypeError, ValueError):
                logger.warning(f"Bad speak_step index: {message.get('index')!r}")
                return
            ctl.speak_step(index)

        else:
            logger.debug(f"Unknown message type: {msg_type!r}")

    async def close(self) -> None:
        await self.controller.close()
