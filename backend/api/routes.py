"""REST API routes for ChefSpeak."""

import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from constants import DEFAULT_LANGUAGE, LANGUAGE_TAGS
from voice.tts_feedback import TTSError
from ..config import PORT, VERSION, SUPPORTED_LANGUAGES
from ..services.profile_service import UnsupportedLanguageError
from ..services.voice_service import voice_service

logger = logging.getLogger(__name__)

router = APIRouter()


class SpeakRequest(BaseModel):
    text: str
    language: str = DEFAULT_LANGUAGE


class ProfileUpdate(BaseModel):
    language: str


@router.get("/api/status")
async def get_status():
    return JSONResponse({
        "version": VERSION,
        "port": PORT,
        "sessions": [bridge.controller.snapshot()["state"] for bridge in voice_service.sessions],
        "sessions_connected": len(voice_service.sessions),
        "tts_mode": voice_service.tts_mode,
        "tts_enabled": voice_service.tts.enabled,
    })


@router.post("/api/speak")
async def speak(request: SpeakRequest):
    """Synthesize text with cloud TTS and return MP3 audio."""
    if not voice_service.tts.enabled:
        return JSONResponse({"status": "error", "message": "TTS not configured"}, status_code=503)

    # Accept either a profile language name ("Hindi") or a tag ("hi-IN")
    tag = LANGUAGE_TAGS.get(request.language, request.language)
    try:
        audio = await asyncio.to_thread(voice_service.tts.synthesize, request.text, tag)
    except TTSError as e:
        logger.error(f"/api/speak failed: {e}")
        return JSONResponse({"status": "error", "message": str(e)}, status_code=502)
    return Response(content=audio, media_type="audio/mpeg")


@router.get("/api/profile/{user_id}")
async def get_profile(user_id: str):
    language = voice_service.profiles.get_language(user_id)
    return JSONResponse({"user_id": user_id, "language": language, "language_tag": LANGUAGE_TAGS[language]})


@router.put("/api/profile/{user_id}")
async def set_profile(user_id: str, update: ProfileUpdate):
    try:
        language = voice_service.profiles.set_language(user_id, update.language)
    except UnsupportedLanguageError:
        return JSONResponse(
            {"status": "error", "message": f"Unsupported language: {update.language}",
             "supported": SUPPORTED_LANGUAGES},
            status_code=400,
        )
    return JSONResponse({"user_id": user_id, "language": language, "language_tag": LANGUAGE_TAGS[language]})
