# roomsync/store/state_store.py
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from roomsync.store.models import SongIdentity, UserProfile, VoteTally
from roomsync.store.patching import PatchError, PatchLike, apply_patches

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def song_identity_of(doc: Optional[Document]) -> Optional[SongIdentity]:
    """(dj, artist, track) of the song playing in `doc`, or None."""
    if not doc:
        return None
    now_playing = doc.get("nowPlaying")
    if not isinstance(now_playing, dict):
        return None
    song = now_playing.get("song")
    if not isinstance(song, dict):
        return None

    dj_uuid = dj_uuid_of(doc)
    artist = song.get("artistName")
    track = song.get("trackName")
    if not (dj_uuid and artist and track):
        return None
    return SongIdentity(dj_uuid=dj_uuid, artist_name=str(artist), track_name=str(track))


def dj_uuid_of(doc: Optional[Document]) -> Optional[str]:
    djs = (doc or {}).get("djs")
    if isinstance(djs, list) and djs and isinstance(djs[0], dict):
        uuid = djs[0].get("uuid")
        return str(uuid) if uuid else None
    return None


class StateStore:
    """
    Owner of a room's mirrored document.

    The document only changes through `apply()` (patch batches) and
    `install()` (full snapshot at join / reconnect). Patches that arrive before
    the first snapshot are held back and replayed once it is installed.
    """

    def __init__(self, room_code: str, snapshot: Optional[Document] = None) -> None:
        self.room_code = room_code
        self._document: Optional[Document] = None
        self._prior: Optional[Document] = None
        self._deferred: List[Tuple[str, List[PatchLike]]] = []
        if snapshot is not None:
            self.install(snapshot)

    # ----------------------------
    # Lifecycle
    # ----------------------------
    @property
    def ready(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> Document:
        return self._document if self._document is not None else {}

    @property
    def prior(self) -> Document:
        """Document as it was before the most recent apply() attempt."""
        return self._prior if self._prior is not None else {}

    @property
    def deferred_count(self) -> int:
        return len(self._deferred)

    def install(self, snapshot: Document, *, replay_deferred: bool = True) -> None:
        """
        Replace the document wholesale.
        Initial join replays deferred patches; reconnect passes replay_deferred=False.
        """
        self._document = copy.deepcopy(snapshot) if isinstance(snapshot, dict) else {}
        self._prior = self._document
        pending, self._deferred = self._deferred, []

        if not replay_deferred:
            if pending:
                logger.debug("room=%s dropped %d deferred patches on resync", self.room_code, len(pending))
            return

        if pending:
            logger.debug("room=%s applying %d deferred patches", self.room_code, len(pending))
        for source, patches in pending:
            self.apply(patches, source=source)

    # ----------------------------
    # Patching
    # ----------------------------
    def apply(self, patches: Iterable[PatchLike], *, source: str = "") -> bool:
        """
        Apply one batch atomically. On failure the batch is logged and dropped
        and the previous document stays in place. Returns True if applied.
        """
        batch = list(patches)
        if not self.ready:
            logger.debug("room=%s deferring patch for %s until state is available", self.room_code, source)
            self._deferred.append((source, batch))
            return False

        self._prior = self._document
        try:
            new_doc = apply_patches(self.document, batch)
        except PatchError as e:
            logger.error("room=%s failed to apply state patch for %s: %s", self.room_code, source, e)
            return False

        self._document = new_doc
        logger.debug("room=%s applied %d patch ops for %s", self.room_code, len(batch), source)
        return True

    # ----------------------------
    # Reads
    # ----------------------------
    def vote_counts(self) -> VoteTally:
        return VoteTally.from_raw(self.document.get("voteCounts"))

    def now_playing(self) -> Optional[Dict[str, Any]]:
        now_playing = self.document.get("nowPlaying")
        return now_playing if isinstance(now_playing, dict) and now_playing else None

    def current_dj_uuid(self) -> Optional[str]:
        return dj_uuid_of(self.document)

    def song_identity(self) -> Optional[SongIdentity]:
        return song_identity_of(self.document)

    def all_users(self) -> List[Dict[str, Any]]:
        users = self.document.get("allUsers")
        return [u for u in users if isinstance(u, dict)] if isinstance(users, list) else []

    def user_profile(self, uuid: str) -> Optional[UserProfile]:
        data = self.document.get("allUserData")
        if not isinstance(data, dict):
            return None
        entry = data.get(uuid)
        if not isinstance(entry, dict):
            return None
        profile = entry.get("userProfile")
        if not isinstance(profile, dict):
            profile = {}
        return UserProfile(uuid=uuid, nickname=profile.get("nickname"), avatar_id=profile.get("avatarId"))

    def settings(self) -> Dict[str, Any]:
        settings = self.document.get("settings")
        return settings if isinstance(settings, dict) else {}

    def hangout_name(self) -> str:
        return self.settings().get("name") or "our Hangout"
