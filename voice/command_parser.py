"""
Voice command parser.
Classifies a recognized utterance as a step-navigation command or a new recipe query.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class NavigationCommand(Enum):
    NEXT = "NEXT"
    PREVIOUS = "PREVIOUS"
    REPEAT = "REPEAT"


@dataclass
class ParsedUtterance:
    """Result of classifying one recognized utterance."""
    text: str                               # normalized (lowercase, stripped)
    command: NavigationCommand | None = None  # None -> treat as a recipe query
    raw_text: str = ""

    @property
    def is_query(self) -> bool:
        return self.command is None


# Ordered list of (pattern, command). First match wins, so
# "go back to the next step" is NEXT.
_NAVIGATION_PATTERNS: list[tuple[re.Pattern, NavigationCommand]] = [
    (re.compile(r"next"), NavigationCommand.NEXT),
    (re.compile(r"previous|back"), NavigationCommand.PREVIOUS),
    (re.compile(r"repeat"), NavigationCommand.REPEAT),
]


def classify_utterance(text: str | None) -> NavigationCommand | None:
    """Return the navigation command in the utterance, or None for a query."""
    if not text:
        return None
    text_lower = text.lower().strip()
    for pattern, command in _NAVIGATION_PATTERNS:
        if pattern.search(text_lower):
            return command
    return None


class CommandParser:
    """Parses recognized utterances into ParsedUtterance records."""

    def parse(self, transcript: str) -> ParsedUtterance | None:
        """
        Classify a transcript.
        Returns None for empty/whitespace transcripts.
        """
        if not transcript or not transcript.strip():
            return None
        text = transcript.strip().lower()
        return ParsedUtterance(
            text=text,
            command=classify_utterance(text),
            raw_text=transcript,
        )
