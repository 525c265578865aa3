# roomsync/transport/ws.py
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from roomsync.settings import get_settings
from roomsync.transport.dispatcher import dispatch_message
from roomsync.transport.protocols import OutError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or origin in allowed:
        return True
    logger.warning("rejecting relay connection from origin %s", origin)
    await websocket.close(code=1008)
    return False


@router.websocket("/ws/{room_code}")
async def ws_room(websocket: WebSocket, room_code: str):
    """
    Relay endpoint: the process holding the room socket pushes every frame
    here and receives vote/chat requests back on the same connection.
    """
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    cid = uuid.uuid4().hex[:10]
    wsman = websocket.app.state.wsman
    await wsman.add(room_code, cid, websocket)
    logger.info("room=%s relay %s connected", room_code, cid)

    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except ValueError:
                err = OutError(code="BAD_MESSAGE", message="Frame is not valid JSON").model_dump()
                await websocket.send_json(err)
                continue

            to_sender = await dispatch_message(
                app=websocket.app,
                room_code=room_code,
                raw=raw,
            )
            for e in to_sender:
                await websocket.send_json(e)

    except WebSocketDisconnect:
        logger.info("room=%s relay %s disconnected", room_code, cid)

    finally:
        await wsman.remove(room_code, cid)
