"""Utterance classification: navigation commands vs. recipe queries."""

import pytest

from voice.command_parser import CommandParser, NavigationCommand, classify_utterance


@pytest.mark.parametrize("text, expected", [
    ("next", NavigationCommand.NEXT),
    ("What's NEXT?", NavigationCommand.NEXT),
    ("go back", NavigationCommand.PREVIOUS),
    ("previous step", NavigationCommand.PREVIOUS),
    ("repeat", NavigationCommand.REPEAT),
    ("please repeat that", NavigationCommand.REPEAT),
    ("butter chicken", None),
    ("", None),
    (None, None),
])
def test_classify_utterance(text, expected):
    assert classify_utterance(text) == expected


def test_priority_is_next_then_back_then_repeat():
    assert classify_utterance("repeat the previous one") == NavigationCommand.PREVIOUS
    assert classify_utterance("repeat the next one") == NavigationCommand.NEXT
    assert classify_utterance("back to the next") == NavigationCommand.NEXT


def test_parse_normalizes_and_flags_queries():
    parsed = CommandParser().parse("  Paneer Tikka ")
    assert parsed.text == "paneer tikka"
    assert parsed.raw_text == "  Paneer Tikka "
    assert parsed.is_query
    assert parsed.command is None


def test_parse_navigation():
    parsed = CommandParser().parse("Next")
    assert parsed.command == NavigationCommand.NEXT
    assert not parsed.is_query


def test_parse_blank_returns_none():
    assert CommandParser().parse("   ") is None
