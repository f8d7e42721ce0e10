"""Shared fakes for the turn controller's collaborators."""

import pytest

from backend.services.chat_service import ChatCompletionError
from backend.state_machine import SpeechTurnController

RECIPE_REPLY = (
    "Sure! Here are the steps:\n"
    "Step 1: Preheat oven.\n"
    "Step 2: Mix batter.\n"
    "Step 3: Bake for 20 minutes.\n"
    "Enjoy!"
)
RECIPE_STEPS = ["Step 1: Preheat oven.", "Step 2: Mix batter.", "Step 3: Bake for 20 minutes."]


class FakeRecognizer:
    def __init__(self, available: bool = True):
        self.available = available
        self.calls: list[tuple] = []

    def start(self, language, interim_results=False, max_alternatives=1):
        self.calls.append(("start", language, interim_results, max_alternatives))

    def abort(self):
        self.calls.append(("abort",))

    @property
    def starts(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "start"]


class FakeSynthesizer:
    """Records speak/cancel order; playback is driven by the test."""

    def __init__(self):
        self.speaking = False
        self.pending = False
        self.log: list[tuple] = []
        self.spoken = []

    def speak(self, utterance):
        self.pending = True
        self.log.append(("speak", utterance.text))
        self.spoken.append(utterance)

    def cancel(self):
        self.speaking = False
        self.pending = False
        self.log.append(("cancel",))

    def play(self):
        self.pending = False
        self.speaking = True

    def finish(self):
        self.pending = False
        self.speaking = False

    @property
    def texts(self) -> list[str]:
        return [u.text for u in self.spoken]


class FakeChat:
    def __init__(self, reply: str = RECIPE_REPLY, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.queries: list[tuple] = []

    def complete(self, query, language="English"):
        self.queries.append((query, language))
        if self.error is not None:
            raise self.error
        return self.reply


class Harness:
    def __init__(self, available=True, reply=RECIPE_REPLY, language="English", **controller_kwargs):
        self.recognizer = FakeRecognizer(available)
        self.synth = FakeSynthesizer()
        self.chat = FakeChat(reply)
        self.errors: list[tuple[str, str]] = []
        self.updates: list[dict] = []
        self.controller = SpeechTurnController(
            self.recognizer,
            self.synth,
            self.chat,
            report_error=lambda kind, msg: self.errors.append((kind, msg)),
            on_change=self.updates.append,
            language=language,
            cancel_delay=0,
            restart_delay=0,
            **controller_kwargs,
        )

    @property
    def error_kinds(self) -> list[str]:
        return [kind for kind, _ in self.errors]

    async def say(self, text: str):
        """One turn: listen, hear text, let every resulting task finish."""
        self.controller.start_listening()
        self.controller.on_recognition_result(text)
        await self.controller.join()

    async def load_recipe(self, query: str = "pancakes"):
        await self.say(query)

    async def play_out(self):
        """Play the last issued utterance to the end and let the restart run."""
        utterance = self.synth.spoken[-1]
        self.synth.play()
        self.controller.on_speech_start(utterance.id)
        self.synth.finish()
        self.controller.on_speech_end(utterance.id)
        await self.controller.join()

    def fail_chat(self, message: str = "boom"):
        self.chat.error = ChatCompletionError(message)


@pytest.fixture
def harness():
    return Harness()


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHTTP:
    """Stands in for requests.Session: records posts, returns a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response
