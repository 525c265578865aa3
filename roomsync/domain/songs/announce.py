# roomsync/domain/songs/announce.py
from __future__ import annotations

import logging
from typing import Any

from roomsync.domain.session import ChatSink, ContentStore
from roomsync.domain.users import UserDirectory
from roomsync.store.models import PlayedSongRecord, SongIdentity, UserProfile
from roomsync.store.redis_repo import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)


def format_message(template: str, **values: Any) -> str:
    """Replace `{name}` placeholders; unknown braces are left alone."""
    out = template
    for k, v in values.items():
        out = out.replace("{" + k + "}", str(v))
    return out


class Announcer:
    """
    Turns song/user events into chat lines: feature check, template lookup,
    placeholder substitution, send. Failures are logged, never raised.
    """

    def __init__(
        self,
        *,
        room_code: str,
        users: UserDirectory,
        content: ContentStore,
        chat: ChatSink,
    ) -> None:
        self.room_code = room_code
        self.users = users
        self.content = content
        self.chat = chat

    def mention(self, uuid: str) -> str:
        return f"@{self.users.display_name(uuid)}"

    async def just_played(self, record: PlayedSongRecord) -> bool:
        tally = record.vote_counts
        return await self._announce(
            "justPlayed",
            "justPlayedMessage",
            username=self.mention(record.dj_uuid),
            trackName=record.track_name,
            artistName=record.artist_name,
            likes=tally.likes,
            dislikes=tally.dislikes,
            stars=tally.stars,
        )

    async def now_playing(self, song: SongIdentity) -> bool:
        return await self._announce(
            "nowPlayingMessage",
            "nowPlayingMessage",
            username=self.mention(song.dj_uuid),
            trackName=song.track_name,
            artistName=song.artist_name,
        )

    async def welcome(self, profile: UserProfile) -> bool:
        return await self._announce(
            "welcomeMessage",
            "welcomeMessage",
            username=self.mention(profile.uuid),
            hangoutName=self.users.store.hangout_name(),
        )

    async def _announce(self, feature: str, template_key: str, **values: Any) -> bool:
        # placeholders are resolved before the first await
        text = ""
        try:
            if not await self.content.is_feature_enabled(self.room_code, feature):
                logger.debug("room=%s feature %s disabled, skipping", self.room_code, feature)
                return False
            template = await self.content.get_template(self.room_code, template_key)
            text = format_message(template or DEFAULT_TEMPLATES[template_key], **values)
            await self.chat.send(self.room_code, text)
        except Exception as e:
            logger.error(
                "room=%s action=announce:%s failed: %s (text=%r)",
                self.room_code, template_key, e, text,
            )
            return False
        return True
