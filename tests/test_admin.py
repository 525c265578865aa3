from fastapi import FastAPI
from fastapi.testclient import TestClient

from roomsync.domain.services import build_room_services
from roomsync.domain.session import SessionRegistry
from roomsync.store.redis_repo import FEATURES, UnknownFeature
from roomsync.transport.admin import router as admin_router


class FakeOutbound:
    async def cast_positive_vote(self, room_code, user_uuid):
        return None

    async def cast_negative_vote(self, room_code, user_uuid):
        return None

    async def send(self, room_code, text):
        return None


class FakeRepo:
    def __init__(self):
        self.templates = {}
        self.disabled = set()

    async def get_template(self, room_code, key):
        return self.templates.get(key)

    async def is_feature_enabled(self, room_code, name):
        return name not in self.disabled

    async def get_templates(self, room_code):
        return dict(self.templates)

    async def set_template(self, room_code, key, template):
        self.templates[key] = template

    async def get_features(self, room_code):
        return {"enabled": [], "disabled": sorted(self.disabled)}

    async def set_feature_enabled(self, room_code, name, enabled):
        if name not in FEATURES:
            raise UnknownFeature(name)
        if enabled:
            self.disabled.discard(name)
        else:
            self.disabled.add(name)
        return True


def _client():
    app = FastAPI()
    repo = FakeRepo()
    out = FakeOutbound()
    app.state.repo = repo
    app.state.sessions = SessionRegistry(
        lambda rc: build_room_services(rc, bot_uuid="bot", votes=out, chat=out, content=repo)
    )
    app.include_router(admin_router)
    services = app.state.sessions.get_or_create("R1")
    services.room.store.install(
        {
            "nowPlaying": {"song": {"trackName": "X", "artistName": "A"}},
            "djs": [{"uuid": "dj1"}],
            "voteCounts": {"likes": 2, "dislikes": 0, "stars": 1},
            "allUsers": [{"uuid": "dj1", "highestRole": "moderator"}],
        }
    )
    services.songs.sync_from_store()
    return TestClient(app), app


def test_list_rooms_and_state():
    client, _ = _client()
    rooms = client.get("/admin/rooms").json()["rooms"]
    assert len(rooms) == 1
    assert rooms[0]["room_code"] == "R1"
    assert rooms[0]["song_state"] == "PLAYING"
    assert rooms[0]["vote_counts"] == {"likes": 2, "dislikes": 0, "stars": 1}

    state = client.get("/admin/rooms/R1/state").json()["state"]
    assert state["djs"] == [{"uuid": "dj1"}]
    assert client.get("/admin/rooms/nope/state").status_code == 404


def test_previous_song_and_role():
    client, _ = _client()
    assert client.get("/admin/rooms/R1/previous-song").json()["previous_song"] is None

    body = client.get("/admin/rooms/R1/users/dj1/role").json()
    assert body == {"uuid": "dj1", "role": "moderator", "level": 2}
    assert client.get("/admin/rooms/R1/users/ghost/role").status_code == 404


def test_feature_and_template_routes():
    client, app = _client()
    r = client.post("/admin/rooms/R1/features/justPlayed", json={"enabled": False})
    assert r.status_code == 200
    assert app.state.repo.disabled == {"justPlayed"}
    assert client.post("/admin/rooms/R1/features/nope", json={"enabled": False}).status_code == 404

    r = client.put("/admin/rooms/R1/templates/welcomeMessage", json={"template": "yo {username}"})
    assert r.status_code == 200
    assert client.get("/admin/rooms/R1/templates").json()["templates"] == {"welcomeMessage": "yo {username}"}
    assert client.put("/admin/rooms/R1/templates/bogus", json={"template": "x"}).status_code == 404


def test_close_room():
    client, app = _client()
    assert client.post("/admin/rooms/R1/close").json() == {"ok": True, "room_code": "R1"}
    assert app.state.sessions.room_codes() == []
    assert client.post("/admin/rooms/R1/close").status_code == 404
