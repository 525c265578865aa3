import pytest

from roomsync.domain.songs import Announcer, format_message
from roomsync.domain.users import UserDirectory
from roomsync.store.models import PlayedSongRecord, SongIdentity, UserProfile, VoteTally
from roomsync.store.state_store import StateStore


class FakeChat:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send(self, room_code, text):
        if self.fail:
            raise RuntimeError("chat down")
        self.sent.append(text)


class FakeContent:
    def __init__(self, templates=None, disabled=()):
        self.templates = templates or {}
        self.disabled = set(disabled)

    async def get_template(self, room_code, key):
        return self.templates.get(key)

    async def is_feature_enabled(self, room_code, name):
        return name not in self.disabled


def _announcer(chat, content):
    store = StateStore(
        "R1",
        {
            "allUserData": {"dj1": {"userProfile": {"nickname": "Alice"}}},
            "settings": {"name": "Late Night"},
        },
    )
    return Announcer(room_code="R1", users=UserDirectory(store), content=content, chat=chat)


def test_format_message():
    assert format_message("{a} and {b} and {a}", a=1, b="x") == "1 and x and 1"
    assert format_message("{unknown} stays", a=1) == "{unknown} stays"


@pytest.mark.asyncio
async def test_just_played_uses_stored_template():
    chat = FakeChat()
    ann = _announcer(chat, FakeContent({"justPlayedMessage": "{username}: {trackName}/{artistName} +{likes} -{dislikes} *{stars}"}))
    record = PlayedSongRecord(
        dj_uuid="dj1", artist_name="A", track_name="X", vote_counts=VoteTally(likes=3, dislikes=1, stars=2)
    )

    assert await ann.just_played(record) is True
    assert chat.sent == ["@Alice: X/A +3 -1 *2"]


@pytest.mark.asyncio
async def test_default_template_when_none_stored():
    chat = FakeChat()
    ann = _announcer(chat, FakeContent())
    await ann.now_playing(SongIdentity(dj_uuid="dj9", artist_name="A", track_name="X"))
    await ann.welcome(UserProfile(uuid="dj1", nickname="Alice"))

    assert chat.sent == ["@dj9 is now playing X by A", "👋 Welcome to Late Night, @Alice!"]


@pytest.mark.asyncio
async def test_disabled_feature_sends_nothing():
    chat = FakeChat()
    ann = _announcer(chat, FakeContent(disabled={"welcomeMessage"}))
    assert await ann.welcome(UserProfile(uuid="dj1", nickname="Alice")) is False
    assert chat.sent == []


@pytest.mark.asyncio
async def test_chat_failure_is_logged(caplog):
    ann = _announcer(FakeChat(fail=True), FakeContent())
    ok = await ann.now_playing(SongIdentity(dj_uuid="dj1", artist_name="A", track_name="X"))
    assert ok is False
    assert any("action=announce:nowPlayingMessage failed" in r.getMessage() for r in caplog.records)
