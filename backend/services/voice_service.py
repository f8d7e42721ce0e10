"""
Voice service — shared collaborators for the API layer.
Holds the chat client, profile store, optional cloud TTS, and live sessions.
"""

from __future__ import annotations

from voice.config import TTS_MODE
from voice.tts_feedback import CloudTTS

from .chat_service import ChatService
from .profile_service import ProfileService
from ..bridge import SessionBridge


class VoiceService:
    """
    Central service used by REST and WebSocket handlers.
    Creates one SessionBridge per connected page.
    """

    def __init__(self):
        self.chat = ChatService()
        self.profiles = ProfileService()
        self.tts = CloudTTS()
        self.tts_mode = TTS_MODE
        self.sessions: list[SessionBridge] = []

    def open_session(self, user_id: str | None = None, **controller_kwargs) -> SessionBridge:
        language = self.profiles.get_language(user_id)
        tts = self.tts if self.tts_mode == "server" else None
        bridge = SessionBridge(
            self.chat, language, tts=tts, user_id=user_id, **controller_kwargs
        )
        self.sessions.append(bridge)
        return bridge

    async def close_session(self, bridge: SessionBridge) -> None:
        if bridge in self.sessions:
            self.sessions.remove(bridge)
        await bridge.close()


# Singleton
voice_service = VoiceService()
