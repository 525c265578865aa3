# roomsync/domain/handlers/handlers_room.py
from __future__ import annotations

import logging

from roomsync.domain.services import RoomServices

logger = logging.getLogger(__name__)


async def handle_updated_room_settings(services: RoomServices) -> None:
    store = services.room.store
    logger.info("room=%s settings updated, name is now %r", services.room.room_code, store.hangout_name())
