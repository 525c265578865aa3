# roomsync/store/redis_repo.py
from __future__ import annotations

from typing import Dict, List, Optional

from redis.asyncio import Redis

from roomsync.store.redis_keys import RK

DEFAULT_TEMPLATES: Dict[str, str] = {
    "justPlayedMessage": "{username} just played {trackName} by {artistName} 👍{likes} 👎{dislikes} ⭐{stars}",
    "nowPlayingMessage": "{username} is now playing {trackName} by {artistName}",
    "welcomeMessage": "👋 Welcome to {hangoutName}, {username}!",
}

FEATURES: List[str] = ["welcomeMessage", "nowPlayingMessage", "justPlayed"]


class UnknownFeature(ValueError):
    pass


class RedisRepo:
    """Editable message templates and feature toggles, per room."""

    def __init__(self, r: Redis):
        self.r = r

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/None safely."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    # ----------------------------
    # Templates
    # ----------------------------
    async def get_template(self, room_code: str, key: str) -> Optional[str]:
        raw = await self.r.hget(RK(room_code).templates(), key)
        value = self._dec(raw)
        if value:
            return value
        return DEFAULT_TEMPLATES.get(key)

    async def set_template(self, room_code: str, key: str, template: str) -> None:
        await self.r.hset(RK(room_code).templates(), key, template)

    async def get_templates(self, room_code: str) -> Dict[str, str]:
        data = await self.r.hgetall(RK(room_code).templates())
        out = dict(DEFAULT_TEMPLATES)
        out.update({self._dec(k): self._dec(v) for k, v in data.items()})
        return out

    # ----------------------------
    # Features (enabled unless disabled)
    # ----------------------------
    async def is_feature_enabled(self, room_code: str, name: str) -> bool:
        return not bool(await self.r.sismember(RK(room_code).disabled_features(), name))

    async def set_feature_enabled(self, room_code: str, name: str, enabled: bool) -> bool:
        """Returns True if the toggle changed anything."""
        if name not in FEATURES:
            raise UnknownFeature(name)
        key = RK(room_code).disabled_features()
        if enabled:
            return bool(await self.r.srem(key, name))
        return bool(await self.r.sadd(key, name))

    async def get_features(self, room_code: str) -> Dict[str, List[str]]:
        members = await self.r.smembers(RK(room_code).disabled_features())
        disabled = {self._dec(x) for x in members}
        return {
            "enabled": [f for f in FEATURES if f not in disabled],
            "disabled": [f for f in FEATURES if f in disabled],
        }
