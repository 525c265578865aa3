# roomsync/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RK:
    """
    Redis key builder for room-scoped bot content.
    The mirrored room document itself is never written to Redis.
    """
    room_code: str

    def templates(self) -> str:
        return f"room:{self.room_code}:templates"  # HASH key -> template text

    def disabled_features(self) -> str:
        return f"room:{self.room_code}:features:disabled"  # SET feature name

    def all_room_keys(self) -> list[str]:
        return [self.templates(), self.disabled_features()]
