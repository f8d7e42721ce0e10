"""Session state — the per-connection record the turn controller reads and updates."""

from dataclasses import dataclass

from constants import LANGUAGE_TAGS, DEFAULT_LANGUAGE, COMMAND_LANGUAGE_TAG


@dataclass
class Session:
    steps: tuple = ()          # replaced wholesale on each successful query
    current_index: int = 0
    listening: bool = False
    speaking: bool = False
    transcript: str = ""       # last recognized utterance
    reply: str = ""            # last raw model reply
    language: str = DEFAULT_LANGUAGE

    def has_steps(self) -> bool:
        return len(self.steps) > 0

    def replace_steps(self, steps) -> None:
        self.steps = tuple(steps)
        self.current_index = 0

    def set_index(self, index: int) -> int:
        """Clamp index into [0, len(steps) - 1] and commit it."""
        if not self.steps:
            self.current_index = 0
        else:
            self.current_index = max(0, min(index, len(self.steps) - 1))
        return self.current_index

    def current_step(self) -> str | None:
        if not self.steps:
            return None
        return self.steps[self.current_index]

    def language_tag(self) -> str:
        return LANGUAGE_TAGS.get(self.language, LANGUAGE_TAGS[DEFAULT_LANGUAGE])

    def recognition_language(self) -> str:
        # Dish names come in the user's language; once steps exist we only
        # expect the English navigation keywords.
        if self.has_steps():
            return COMMAND_LANGUAGE_TAG
        return self.language_tag()

    def speech_language(self) -> str:
        if self.language == DEFAULT_LANGUAGE:
            return COMMAND_LANGUAGE_TAG
        return self.language_tag()

    def to_dict(self) -> dict:
        return {
            "steps": list(self.steps),
            "current_index": self.current_index,
            "current_step": self.current_step(),
            "listening": self.listening,
            "speaking": self.speaking,
            "transcript": self.transcript,
            "reply": self.reply,
            "language": self.language,
        }
