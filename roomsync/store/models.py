# roomsync/store/models.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field


PatchOpName = Literal["add", "replace", "remove"]


class PatchOp(BaseModel):
    """
    One JSON Patch operation as delivered by the room socket.
    `value` is left unset for remove ops so the dumped dict stays a valid patch.
    """
    op: PatchOpName
    path: str
    value: Any = None

    def as_patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class VoteTally(BaseModel):
    likes: int = Field(default=0, ge=0)
    dislikes: int = Field(default=0, ge=0)
    stars: int = Field(default=0, ge=0)

    @classmethod
    def from_raw(cls, raw: Any) -> "VoteTally":
        """Lenient read of a remote voteCounts object (missing/garbage -> 0)."""
        if not isinstance(raw, dict):
            return cls()
        return cls(
            likes=count_value(raw.get("likes")),
            dislikes=count_value(raw.get("dislikes")),
            stars=count_value(raw.get("stars")),
        )


def count_value(x: Any) -> int:
    """Coerce a remote count to a non-negative int."""
    if isinstance(x, bool):
        return int(x)
    try:
        n = int(x)
    except (TypeError, ValueError):
        return 0
    return n if n > 0 else 0


class SongIdentity(BaseModel):
    dj_uuid: str
    artist_name: str
    track_name: str


class PlayedSongRecord(BaseModel):
    """The single archived "just played" slot of a room session."""
    dj_uuid: str
    artist_name: str
    track_name: str
    vote_counts: VoteTally = Field(default_factory=VoteTally)
    archived_at: int = 0


class UserProfile(BaseModel):
    uuid: str
    nickname: Optional[str] = None
    avatar_id: Optional[str] = None
