# roomsync/domain/session.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Set

from roomsync.domain.common.types import SongState
from roomsync.store.models import PlayedSongRecord
from roomsync.store.state_store import StateStore

logger = logging.getLogger(__name__)


class VoteAction(Protocol):
    async def cast_positive_vote(self, room_code: str, user_uuid: str) -> None: ...

    async def cast_negative_vote(self, room_code: str, user_uuid: str) -> None: ...


class ChatSink(Protocol):
    async def send(self, room_code: str, text: str) -> None: ...


class ContentStore(Protocol):
    async def get_template(self, room_code: str, key: str) -> Optional[str]: ...

    async def is_feature_enabled(self, room_code: str, name: str) -> bool: ...


@dataclass
class RoomSession:
    """
    Everything mutable about one room connection: the mirrored document,
    the archived "just played" slot and the song timer handle.
    Only touched synchronously between awaits.
    """
    room_code: str
    bot_uuid: str
    store: StateStore
    song_timer_sec: float = 90.0
    announce_settle_sec: float = 5.0
    song_state: SongState = "NO_SONG"
    previous_song: Optional[PlayedSongRecord] = None
    timer: Optional[asyncio.Task] = None
    announce_task: Optional[asyncio.Task] = None
    auto_votes: int = 0
    tasks: Set[asyncio.Task] = field(default_factory=set)

    def summary(self) -> Dict[str, Any]:
        identity = self.store.song_identity()
        return {
            "room_code": self.room_code,
            "synced": self.store.ready,
            "song_state": self.song_state,
            "now_playing": identity.model_dump() if identity else None,
            "vote_counts": self.store.vote_counts().model_dump(),
            "has_previous_song": self.previous_song is not None,
            "timer_active": self.timer is not None and not self.timer.done(),
            "auto_votes": self.auto_votes,
        }


class SessionRegistry:
    """
    room_code -> RoomServices. Sessions are created on first frame for a room
    (patches before the join snapshot are deferred by the store).
    """

    def __init__(self, factory: Callable[[str], Any]) -> None:
        self._factory = factory
        self._rooms: Dict[str, Any] = {}

    def get(self, room_code: str) -> Optional[Any]:
        return self._rooms.get(room_code)

    def get_or_create(self, room_code: str) -> Any:
        services = self._rooms.get(room_code)
        if services is None:
            services = self._factory(room_code)
            self._rooms[room_code] = services
            logger.info("room=%s session created", room_code)
        return services

    def close(self, room_code: str) -> bool:
        services = self._rooms.pop(room_code, None)
        if services is None:
            return False
        services.songs.shutdown()
        logger.info("room=%s session closed", room_code)
        return True

    def close_all(self) -> None:
        for room_code in list(self._rooms.keys()):
            self.close(room_code)

    def room_codes(self) -> list[str]:
        return sorted(self._rooms.keys())
