import pytest

from roomsync.store.redis_keys import RK
from roomsync.store.redis_repo import DEFAULT_TEMPLATES, RedisRepo, UnknownFeature


class FakeRedis:
    """Just the hash/set commands the repo uses; values come back as bytes."""

    def __init__(self):
        self.hashes = {}
        self.sets = {}

    async def hget(self, key, field):
        v = self.hashes.get(key, {}).get(field)
        return v.encode() if v is not None else None

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hgetall(self, key):
        return {k.encode(): v.encode() for k, v in self.hashes.get(key, {}).items()}

    async def sismember(self, key, member):
        return 1 if member in self.sets.get(key, set()) else 0

    async def sadd(self, key, member):
        s = self.sets.setdefault(key, set())
        if member in s:
            return 0
        s.add(member)
        return 1

    async def srem(self, key, member):
        s = self.sets.get(key, set())
        if member not in s:
            return 0
        s.remove(member)
        return 1

    async def smembers(self, key):
        return {m.encode() for m in self.sets.get(key, set())}


def test_keys():
    rk = RK("R1")
    assert rk.templates() == "room:R1:templates"
    assert rk.disabled_features() == "room:R1:features:disabled"


@pytest.mark.asyncio
async def test_templates_fall_back_to_defaults():
    repo = RedisRepo(FakeRedis())
    assert await repo.get_template("R1", "welcomeMessage") == DEFAULT_TEMPLATES["welcomeMessage"]

    await repo.set_template("R1", "welcomeMessage", "hi {username}")
    assert await repo.get_template("R1", "welcomeMessage") == "hi {username}"
    assert await repo.get_template("R2", "welcomeMessage") == DEFAULT_TEMPLATES["welcomeMessage"]

    templates = await repo.get_templates("R1")
    assert templates["welcomeMessage"] == "hi {username}"
    assert templates["justPlayedMessage"] == DEFAULT_TEMPLATES["justPlayedMessage"]


@pytest.mark.asyncio
async def test_features_enabled_unless_disabled():
    repo = RedisRepo(FakeRedis())
    assert await repo.is_feature_enabled("R1", "justPlayed") is True

    assert await repo.set_feature_enabled("R1", "justPlayed", False) is True
    assert await repo.set_feature_enabled("R1", "justPlayed", False) is False
    assert await repo.is_feature_enabled("R1", "justPlayed") is False
    assert await repo.get_features("R1") == {
        "enabled": ["welcomeMessage", "nowPlayingMessage"],
        "disabled": ["justPlayed"],
    }

    assert await repo.set_feature_enabled("R1", "justPlayed", True) is True
    assert await repo.is_feature_enabled("R1", "justPlayed") is True


@pytest.mark.asyncio
async def test_unknown_feature_rejected():
    repo = RedisRepo(FakeRedis())
    with pytest.raises(UnknownFeature):
        await repo.set_feature_enabled("R1", "fireworks", True)
