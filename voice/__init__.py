"""
ChefSpeak Voice Layer
Utterance classification, recipe step parsing, and speech output.
"""

from voice.command_parser import CommandParser, NavigationCommand, ParsedUtterance, classify_utterance
from voice.step_parser import parse_steps
from voice.tts_feedback import CloudTTS, Narrator, SpokenUtterance, TTSError
