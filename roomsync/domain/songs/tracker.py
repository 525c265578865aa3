# roomsync/domain/songs/tracker.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, Optional

from roomsync.domain.common.types import REACTION_EVENT
from roomsync.domain.reactions import ReactionOutcome, classify_reaction
from roomsync.domain.session import RoomSession, VoteAction
from roomsync.domain.songs.announce import Announcer
from roomsync.domain.tally import add_star, merge_field, vote_updates_from_patch
from roomsync.store.models import PlayedSongRecord, VoteTally
from roomsync.store.state_store import song_identity_of
from roomsync.util.timeutil import now_ts

logger = logging.getLogger(__name__)


class SongTracker:
    """
    Song lifecycle for one room session.

    NO_SONG -> PLAYING on a song change with something playing, back to
    NO_SONG when playback stops. Keeps the archived previous-song record in
    step with late votes/reactions and owns the auto-upvote timer.
    All session mutations happen before the first await of each method.
    """

    def __init__(self, session: RoomSession, *, votes: VoteAction, announcer: Announcer) -> None:
        self.session = session
        self.votes = votes
        self.announcer = announcer

    # ----------------------------
    # Song change
    # ----------------------------
    def on_song_change(self) -> Optional[PlayedSongRecord]:
        """
        Called after the song-change diff has been applied to the store.
        The outgoing song is read from the store's prior document.
        Returns the newly archived record, if any.
        """
        s = self.session
        prior = s.store.prior
        outgoing = song_identity_of(prior)
        incoming = s.store.song_identity()

        if incoming is not None and incoming == outgoing:
            # same song re-announced by the server; keep its timer
            logger.debug("room=%s song change for the same song, ignoring", s.room_code)
            return None

        archived: Optional[PlayedSongRecord] = None
        if outgoing is not None and outgoing != incoming:
            archived = PlayedSongRecord(
                dj_uuid=outgoing.dj_uuid,
                artist_name=outgoing.artist_name,
                track_name=outgoing.track_name,
                vote_counts=VoteTally.from_raw(prior.get("voteCounts")),
                archived_at=now_ts(),
            )
            self._archive(archived)

        self._cancel_timer()
        if s.store.now_playing() is not None:
            s.song_state = "PLAYING"
            self._start_timer()
            if incoming is not None and incoming != outgoing:
                self._spawn(self.announcer.now_playing(incoming))
        else:
            s.song_state = "NO_SONG"

        logger.debug(
            "room=%s song change: state=%s archived=%s",
            s.room_code, s.song_state, archived.track_name if archived else None,
        )
        return archived

    def nothing_playing(self) -> None:
        s = self.session
        self._cancel_timer()
        s.song_state = "NO_SONG"
        logger.info("room=%s nothing is playing", s.room_code)

    def sync_from_store(self) -> None:
        """Align song_state with a freshly installed snapshot (join/reconnect)."""
        s = self.session
        s.song_state = "PLAYING" if s.store.now_playing() is not None else "NO_SONG"
        if s.song_state == "NO_SONG":
            self._cancel_timer()

    # ----------------------------
    # Votes
    # ----------------------------
    def merge_vote_update(self, patches: Iterable[Any]) -> Optional[PlayedSongRecord]:
        """
        Fold voteCounts replaces from a vote notification into the archived
        record. The live document was already patched by the router.
        """
        s = self.session
        updates = vote_updates_from_patch(patches)
        if not updates:
            return None

        record = s.previous_song
        if record is None:
            logger.debug("room=%s no previous song stored to update vote counts", s.room_code)
            return None

        tally = record.vote_counts
        for f, v in updates.items():
            tally = merge_field(tally, f, v)
        record.vote_counts = tally
        logger.debug("room=%s previous song votes now %s", s.room_code, tally.model_dump())
        return record

    def record_reaction(self, user_uuid: Optional[str], symbol: Any) -> ReactionOutcome:
        """
        Star-class reactions count one star. A reaction from the DJ of the
        archived song lands on that record only and the live tally of the new
        song is left alone; any other lands on the live tally. Before the first
        snapshot there is no live tally to add to, so the star is dropped.
        """
        s = self.session
        outcome = classify_reaction(symbol)
        if outcome is ReactionOutcome.IGNORED:
            logger.debug("room=%s reaction %r is not a star vote", s.room_code, symbol)
            return outcome

        record = s.previous_song
        if record is not None and user_uuid and user_uuid == record.dj_uuid:
            record.vote_counts = add_star(record.vote_counts)
            logger.info(
                "room=%s star from %s counted on previous song (%d)",
                s.room_code, user_uuid, record.vote_counts.stars,
            )
            return outcome

        if not s.store.ready:
            logger.debug("room=%s star reaction before state is available, dropped", s.room_code)
            return outcome

        stars = s.store.vote_counts().stars + 1
        s.store.apply(
            [{"op": "replace", "path": "/voteCounts/stars", "value": stars}],
            source=REACTION_EVENT,
        )
        logger.info("room=%s star reaction from %s, current song stars=%d", s.room_code, user_uuid, stars)
        return outcome

    # ----------------------------
    # Archive + announcement
    # ----------------------------
    def take_previous_song(self, record: Optional[PlayedSongRecord] = None) -> Optional[PlayedSongRecord]:
        """Consume the archived slot (only if it still holds `record`, when given)."""
        s = self.session
        current = s.previous_song
        if current is None or (record is not None and current is not record):
            return None
        s.previous_song = None
        s.announce_task = None
        return current

    def _archive(self, record: PlayedSongRecord) -> None:
        s = self.session
        if s.previous_song is not None:
            # announce the unconsumed record now instead of dropping it
            if s.announce_task is not None:
                s.announce_task.cancel()
            stale = self.take_previous_song()
            if stale is not None:
                self._spawn(self.announcer.just_played(stale))

        s.previous_song = record
        s.announce_task = self._spawn(self._announce_after_settle(record))

    async def _announce_after_settle(self, record: PlayedSongRecord) -> None:
        await asyncio.sleep(self.session.announce_settle_sec)
        taken = self.take_previous_song(record)
        if taken is None:
            return
        await self.announcer.just_played(taken)

    # ----------------------------
    # Song timer
    # ----------------------------
    def _start_timer(self) -> None:
        s = self.session
        self._cancel_timer()
        s.timer = self._spawn(self._song_timer())

    def _cancel_timer(self) -> None:
        s = self.session
        if s.timer is not None:
            s.timer.cancel()
            s.timer = None

    async def _song_timer(self) -> None:
        s = self.session
        await asyncio.sleep(s.song_timer_sec)
        if s.timer is asyncio.current_task():
            s.timer = None
        s.auto_votes += 1
        try:
            await self.votes.cast_positive_vote(s.room_code, s.bot_uuid)
        except Exception as e:
            logger.error(
                "room=%s user=%s action=upvote failed: %s",
                s.room_code, s.bot_uuid, e,
            )

    def shutdown(self) -> None:
        s = self.session
        self._cancel_timer()
        s.announce_task = None
        for task in list(s.tasks):
            task.cancel()
        s.tasks.clear()

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        """Start a background task and hold a reference to it until it is done."""
        task = asyncio.ensure_future(coro)
        self.session.tasks.add(task)
        task.add_done_callback(self.session.tasks.discard)
        return task
