# roomsync/transport/outbound.py
from __future__ import annotations

import logging

from roomsync.transport.protocols import OutChatMessage, OutgoingEvent, OutVoteOnSong
from roomsync.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


class RelayUnavailable(RuntimeError):
    pass


class RelayOutbound:
    """
    Vote action + chat collaborators. Both are requests to the relay that
    holds the real room socket, sent over the same websocket it feeds us on.
    """

    def __init__(self, wsman: WSManager) -> None:
        self.wsman = wsman

    async def cast_positive_vote(self, room_code: str, user_uuid: str) -> None:
        await self._send(room_code, OutVoteOnSong(room_uuid=room_code, user_uuid=user_uuid, song_votes={"like": True}))

    async def cast_negative_vote(self, room_code: str, user_uuid: str) -> None:
        await self._send(room_code, OutVoteOnSong(room_uuid=room_code, user_uuid=user_uuid, song_votes={"like": False}))

    async def send(self, room_code: str, text: str) -> None:
        await self._send(room_code, OutChatMessage(room_uuid=room_code, text=text))

    async def _send(self, room_code: str, event: OutgoingEvent) -> None:
        delivered = await self.wsman.broadcast(room_code, event.model_dump())
        if delivered == 0:
            raise RelayUnavailable(f"no relay connected for room {room_code}")
        logger.debug("room=%s sent %s to %d relay(s)", room_code, event.type, delivered)
