# roomsync/domain/handlers/handlers_song.py
from __future__ import annotations

import logging

from roomsync.domain.services import RoomServices
from roomsync.transport.protocols import InStateless

logger = logging.getLogger(__name__)


async def handle_played_song(services: RoomServices) -> None:
    services.songs.on_song_change()


async def handle_played_one_time_animation(msg: InStateless, services: RoomServices) -> None:
    params = msg.params or {}
    emoji = params.get("emoji")
    if not emoji:
        logger.debug("room=%s animation without emoji: %s", services.room.room_code, params.get("animation"))
        return
    services.songs.record_reaction(params.get("userUuid"), emoji)


async def handle_nothing_playing(services: RoomServices) -> None:
    services.songs.nothing_playing()
