# roomsync/transport/ws_manager.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class Conn:
    cid: str
    ws: WebSocket


class WSManager:
    """
    In-memory relay connection registry.
    - room_code -> cid -> websocket
    Transport-only: no room state, no song rules.
    """
    def __init__(self) -> None:
        self._rooms: Dict[str, Dict[str, Conn]] = {}
        self._lock = asyncio.Lock()

    async def add(self, room_code: str, cid: str, ws: WebSocket) -> None:
        async with self._lock:
            self._rooms.setdefault(room_code, {})[cid] = Conn(cid=cid, ws=ws)

    async def remove(self, room_code: str, cid: str) -> None:
        async with self._lock:
            room = self._rooms.get(room_code)
            if not room:
                return
            room.pop(cid, None)
            if not room:
                self._rooms.pop(room_code, None)

    async def broadcast(self, room_code: str, event: dict) -> int:
        """Send to every relay connection of the room. Returns how many got it."""
        # copy conns under lock, send outside lock
        async with self._lock:
            room = self._rooms.get(room_code, {})
            conns = list(room.values())

        delivered = 0
        for c in conns:
            try:
                await c.ws.send_json(event)
                delivered += 1
            except Exception as e:
                # dead socket; ws.py cleans up on disconnect
                logger.warning("room=%s send to relay %s failed: %s", room_code, c.cid, e)
        return delivered

    async def room_size(self, room_code: str) -> int:
        async with self._lock:
            return len(self._rooms.get(room_code, {}))
