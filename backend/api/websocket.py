"""WebSocket endpoint — one turn controller per connected page."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..bridge import SessionBridge
from ..services.voice_service import voice_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _pump(websocket: WebSocket, bridge: SessionBridge) -> None:
    """Drain the session outbox to the page, in order."""
    while True:
        message = await bridge.outbox.get()
        await websocket.send_text(json.dumps(message, default=str))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, user_id: str | None = None):
    await websocket.accept()
    bridge = voice_service.open_session(user_id)
    sender = asyncio.create_task(_pump(websocket, bridge))
    logger.info(f"Client connected ({len(voice_service.sessions)} total)")

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Dropping non-JSON message: {data[:100]!r}")
                continue
            if not isinstance(message, dict):
                continue
            bridge.handle(message)
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        await voice_service.close_session(bridge)
        logger.info(f"{len(voice_service.sessions)} sessions remaining")
