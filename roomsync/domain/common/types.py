# roomsync/domain/common/types.py
from __future__ import annotations

from typing import Literal

SongState = Literal["NO_SONG", "PLAYING"]
VoteField = Literal["likes", "dislikes", "stars"]

Role = Literal["owner", "coOwner", "moderator", "user"]

MEMBERSHIP_EVENTS = frozenset({"userJoined", "userLeft", "addedDj", "removedDj"})

SONG_CHANGE_EVENT = "playedSong"
VOTE_UPDATE_EVENT = "votedOnSong"
REACTION_EVENT = "playedOneTimeAnimation"

NOTHING_PLAYING_ERROR = "Nothing is playing right now."
