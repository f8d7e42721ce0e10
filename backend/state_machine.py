"""Speech-Turn State Machine — core turn-taking logic for ChefSpeak.

One controller per browser session. It owns the Session record and decides
when to listen, when to speak, and how to read a recognized utterance.
Collaborators are injected:

  recognizer:   available, start(language, interim_results, max_alternatives), abort()
  synthesizer:  speaking, pending, speak(SpokenUtterance), cancel()
  chat:         complete(query, language) -> str   (blocking, run in a worker thread)
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from constants import DEFAULT_LANGUAGE, MAX_STEPS, STEP_STYLE_VERBATIM
from voice.command_parser import CommandParser, NavigationCommand
from voice.config import CANCEL_DELAY_S, RESTART_DELAY_S, RECOGNITION_SETTINGS, FEEDBACK_MESSAGES
from voice.step_parser import parse_steps
from voice.tts_feedback import Narrator, CloudTTS

from .services.chat_service import ChatCompletionError
from .session import Session

logger = logging.getLogger(__name__)


class TurnState(Enum):
    IDLE = "IDLE"
    LISTENING = "LISTENING"
    PROCESSING = "PROCESSING"
    SPEAKING = "SPEAKING"
    AWAITING_NEXT_TURN = "AWAITING_NEXT_TURN"


class SpeechTurnController:
    def __init__(
        self,
        recognizer,
        synthesizer,
        chat,
        report_error: Optional[Callable[[str, str], None]] = None,
        on_change: Optional[Callable[[dict], None]] = None,
        language: str = DEFAULT_LANGUAGE,
        cancel_delay: float = CANCEL_DELAY_S,
        restart_delay: float = RESTART_DELAY_S,
        tts: Optional[CloudTTS] = None,
        step_style: str = STEP_STYLE_VERBATIM,
        max_steps: int = MAX_STEPS,
    ):
        self.recognizer = recognizer
        self.chat = chat
        self.parser = CommandParser()
        self.restart_delay = restart_delay
        self.step_style = step_style
        self.max_steps = max_steps or None
        self.state = TurnState.IDLE

        self._session = Session(language=language)
        self._narrator = Narrator(synthesizer, cancel_delay=cancel_delay, tts=tts)
        self._report_fn = report_error
        self._on_change = on_change
        self._capability_reported = False
        self._restart_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()

    # --- Read-only views ---

    @property
    def steps(self) -> tuple:
        return self._session.steps

    @property
    def current_index(self) -> int:
        return self._session.current_index

    @property
    def narrator(self) -> Narrator:
        return self._narrator

    def snapshot(self) -> dict:
        """Return current state for frontend broadcast."""
        return {"state": self.state.value, **self._session.to_dict()}

    # --- User actions ---

    def start_listening(self) -> bool:
        """IDLE/AWAITING_NEXT_TURN -> LISTENING. Returns False if listening could not start."""
        if not self.recognizer.available:
            if not self._capability_reported:
                self._capability_reported = True
                self._report("capability_missing")
            self._set_state(TurnState.IDLE)
            return False

        if self.state == TurnState.LISTENING:
            return True
        if self.state == TurnState.PROCESSING:
            logger.info("Still waiting on the assistant; not listening yet")
            return False

        # Listening and speaking never overlap
        self._cancel_restart()
        if self._narrator.busy:
            self._narrator.cancel()
            self._session.speaking = False

        language = self._session.recognition_language()
        self.recognizer.start(language, **RECOGNITION_SETTINGS)
        self._session.listening = True
        logger.info(f"Recognition started ({language})")
        self._set_state(TurnState.LISTENING)
        return True

    def abort(self) -> None:
        """Any state -> IDLE. Stops recognition and pending speech; steps are kept."""
        self.recognizer.abort()
        self._cancel_restart()
        self._narrator.cancel()
        self._session.listening = False
        self._session.speaking = False
        logger.info("Turn aborted")
        self._set_state(TurnState.IDLE)

    def speak_step(self, index: int) -> bool:
        """Play a specific step (e.g. the speaker button next to it)."""
        if self.state == TurnState.PROCESSING:
            logger.info("Still waiting on the assistant; not speaking a step yet")
            return False
        if not self._session.has_steps():
            self._report("no_steps")
            return False
        self._session.set_index(index)
        self._speak_current()
        return True

    # --- Recognition events ---

    def on_recognition_result(self, transcript: str) -> Optional[asyncio.Task]:
        """
        LISTENING -> PROCESSING, then navigate or query.
        Returns the query task when the utterance goes to the assistant.
        """
        if self.state != TurnState.LISTENING:
            logger.debug(f"Ignoring result outside LISTENING ({self.state.value}): '{transcript}'")
            return None

        self._session.listening = False
        parsed = self.parser.parse(transcript)
        if parsed is None:
            self._set_state(TurnState.IDLE)
            return None

        self._session.transcript = parsed.text
        self._set_state(TurnState.PROCESSING)

        if parsed.command is not None:
            self._navigate(parsed.command)
            return None

        logger.info(f"Fetching recipe for query: '{parsed.text}'")
        return self._spawn(self._query(parsed.text))

    def on_recognition_end(self) -> None:
        self._session.listening = False
        if self.state == TurnState.LISTENING:
            # Ended without a final result
            self._set_state(TurnState.IDLE)

    def on_recognition_error(self, error: str) -> None:
        self._session.listening = False
        if error == "aborted":
            # Expected after abort(); not a failure
            logger.debug("Recognition aborted")
            return
        logger.error(f"Recognition error: {error}")
        self._report("recognition_error", detail=error)
        self._set_state(TurnState.IDLE)

    # --- Synthesis events ---

    def on_speech_start(self, utterance_id=None) -> None:
        if not self._narrator.is_current(utterance_id):
            return
        self._session.speaking = True
        self._set_state(TurnState.SPEAKING)

    def on_speech_end(self, utterance_id=None) -> None:
        """SPEAKING -> AWAITING_NEXT_TURN, then LISTENING after the settle delay."""
        if not self._narrator.is_current(utterance_id) or self._narrator.scheduled:
            logger.debug(f"Ignoring end of superseded utterance {utterance_id}")
            return
        self._session.speaking = False
        if self.state != TurnState.SPEAKING:
            self._notify()
            return
        self._set_state(TurnState.AWAITING_NEXT_TURN)
        self._cancel_restart()
        self._restart_task = self._spawn(self._restart_after_delay())

    # --- Lifecycle ---

    async def join(self) -> None:
        """Wait until no controller task (query, speak, restart) is outstanding."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if self._narrator.scheduled:
                pending.append(self._narrator.task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        self._cancel_restart()
        self._narrator.cancel()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    # --- Internals ---

    def _navigate(self, command: NavigationCommand) -> None:
        if not self._session.has_steps():
            self._report("no_steps")
            self._set_state(TurnState.IDLE)
            return

        index = self._session.current_index
        if command == NavigationCommand.NEXT:
            if index + 1 < len(self._session.steps):
                self._session.set_index(index + 1)
            else:
                logger.info(f"Already at last step. Repeating step {index}")
        elif command == NavigationCommand.PREVIOUS:
            self._session.set_index(index - 1)

        logger.info(f"{command.value} -> step {self._session.current_index}")
        self._speak_current()

    async def _query(self, query: str) -> None:
        try:
            reply = await asyncio.to_thread(self.chat.complete, query, self._session.language)
        except ChatCompletionError as e:
            logger.error(f"Error calling chat API: {e}")
            self._report("chat_failed")
            if self.state == TurnState.PROCESSING:
                self._set_state(TurnState.IDLE)
            return

        self._session.reply = reply
        steps = parse_steps(reply, style=self.step_style, max_steps=self.max_steps)
        if not steps:
            logger.warning(f"Could not extract steps. Raw reply: {reply[:200]!r}")
            self._report("no_steps_extracted")
            if self.state == TurnState.PROCESSING:
                self._set_state(TurnState.IDLE)
            else:
                self._notify()
            return

        self._session.replace_steps(steps)
        logger.info(f"Extracted {len(steps)} steps")

        if self.state != TurnState.PROCESSING:
            # Aborted while waiting: keep the steps, stay quiet
            self._notify()
            return
        self._speak_current()

    def _speak_current(self) -> None:
        if self._session.listening:
            self.recognizer.abort()
            self._session.listening = False
        self._cancel_restart()
        # current_step is resolved when the speak is issued, not now
        self._narrator.say(
            self._session.current_step,
            self._session.speech_language(),
        )
        self._set_state(TurnState.SPEAKING)

    async def _restart_after_delay(self) -> None:
        await asyncio.sleep(self.restart_delay)
        if self.state != TurnState.AWAITING_NEXT_TURN:
            return
        if self._narrator.busy:
            logger.debug("Speech still pending; not restarting recognition")
            return
        self.start_listening()

    def _cancel_restart(self) -> None:
        task = self._restart_task
        self._restart_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _report(self, kind: str, detail: str = "") -> None:
        message = FEEDBACK_MESSAGES[kind].format(detail=detail)
        logger.warning(f"[{kind}] {message}")
        if self._report_fn:
            self._report_fn(kind, message)

    def _set_state(self, state: TurnState) -> None:
        if state != self.state:
            logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_change:
            self._on_change(self.snapshot())
