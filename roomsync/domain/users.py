# roomsync/domain/users.py
from __future__ import annotations

from typing import Dict

from roomsync.domain.common.types import Role
from roomsync.store.state_store import StateStore

ROLE_LEVELS: Dict[str, int] = {
    "owner": 4,
    "coOwner": 3,
    "moderator": 2,
    "user": 1,
}


class UserNotFound(LookupError):
    pass


class UserDirectory:
    """Role lookup over the mirrored `allUsers` list."""

    def __init__(self, store: StateStore) -> None:
        self.store = store

    def get_role(self, uuid: str) -> Role:
        for u in self.store.all_users():
            if u.get("uuid") == uuid:
                role = u.get("highestRole") or "user"
                return role if role in ROLE_LEVELS else "user"
        raise UserNotFound(f"User with UUID {uuid} not found in the room")

    def role_level(self, uuid: str) -> int:
        return ROLE_LEVELS[self.get_role(uuid)]

    def display_name(self, uuid: str) -> str:
        profile = self.store.user_profile(uuid)
        if profile is not None and profile.nickname:
            return profile.nickname
        return uuid
