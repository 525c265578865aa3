from __future__ import annotations

from typing import Awaitable, Callable, Dict

from roomsync.domain.common.types import REACTION_EVENT, SONG_CHANGE_EVENT

from .handlers_membership import (
    handle_added_dj,
    handle_removed_dj,
    handle_user_joined,
    handle_user_left,
)
from .handlers_room import handle_updated_room_settings
from .handlers_song import (
    handle_nothing_playing,
    handle_played_one_time_animation,
    handle_played_song,
)

# (state, frame, services)
MEMBERSHIP_HANDLERS: Dict[str, Callable[..., Awaitable[None]]] = {
    "userJoined": handle_user_joined,
    "userLeft": handle_user_left,
    "addedDj": handle_added_dj,
    "removedDj": handle_removed_dj,
}

# (services)
STATEFUL_HANDLERS: Dict[str, Callable[..., Awaitable[None]]] = {
    SONG_CHANGE_EVENT: handle_played_song,
    "updatedRoomSettings": handle_updated_room_settings,
}

# (frame, services)
STATELESS_HANDLERS: Dict[str, Callable[..., Awaitable[None]]] = {
    REACTION_EVENT: handle_played_one_time_animation,
}

__all__ = [
    "MEMBERSHIP_HANDLERS",
    "STATEFUL_HANDLERS",
    "STATELESS_HANDLERS",
    "handle_nothing_playing",
]
