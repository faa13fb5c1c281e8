# designz_loader/api/websocket.py
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from designz_loader.core.events import session_channel
from designz_loader.core.redis import redis_client
from designz_loader.models.db import UploadSession

logger = logging.getLogger(__name__)

router = APIRouter()

@router.websocket("/ws/bulk-upload/{session_id}")
async def session_events(websocket: WebSocket, session_id: int):
    await websocket.accept()
    session = await UploadSession.get_or_none(id=session_id)
    if not session:
        await websocket.close(code=4404)
        return

    # Current state first, then live updates
    await websocket.send_json({"status": session.status, "generation": session.generation})

    pubsub = redis_client.pubsub()
    await pubsub.subscribe(session_channel(session_id))
    try:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            await websocket.send_json(json.loads(message["data"]))
    except WebSocketDisconnect:
        logger.debug(f"Client left session {session_id} events")
    finally:
        await pubsub.unsubscribe(session_channel(session_id))
        await pubsub.aclose()
