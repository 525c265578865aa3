# roomsync/domain/services.py
from __future__ import annotations

from dataclasses import dataclass

from roomsync.domain.session import ChatSink, ContentStore, RoomSession, VoteAction
from roomsync.domain.songs import Announcer, SongTracker
from roomsync.domain.users import UserDirectory
from roomsync.store.state_store import StateStore


@dataclass
class RoomServices:
    """Handles passed to event handlers: room session, users, songs, chat."""
    room: RoomSession
    users: UserDirectory
    songs: SongTracker
    announcer: Announcer


def build_room_services(
    room_code: str,
    *,
    bot_uuid: str,
    votes: VoteAction,
    chat: ChatSink,
    content: ContentStore,
    song_timer_sec: float = 90.0,
    announce_settle_sec: float = 5.0,
) -> RoomServices:
    store = StateStore(room_code)
    session = RoomSession(
        room_code=room_code,
        bot_uuid=bot_uuid,
        store=store,
        song_timer_sec=song_timer_sec,
        announce_settle_sec=announce_settle_sec,
    )
    users = UserDirectory(store)
    announcer = Announcer(room_code=room_code, users=users, content=content, chat=chat)
    songs = SongTracker(session, votes=votes, announcer=announcer)
    return RoomServices(room=session, users=users, songs=songs, announcer=announcer)
