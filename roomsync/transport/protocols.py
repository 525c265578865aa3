# roomsync/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticCustomError

from roomsync.store.models import PatchOp


# =========================
# Incoming (relay -> server)
# =========================

class InBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str


# ---- Transport lifecycle ----

class InJoin(InBase):
    """Initial room snapshot, sent once the relay has joined the room."""
    type: Literal["join"] = "join"
    state: Dict[str, Any]


class InReconnect(InBase):
    """Fresh snapshot after the relay's socket reconnected. No patch replay."""
    type: Literal["reconnect"] = "reconnect"
    state: Dict[str, Any]


class InTransportError(InBase):
    type: Literal["error"] = "error"
    reason: str = ""


# ---- Room channels ----

class InStateful(InBase):
    type: Literal["stateful"] = "stateful"
    name: str = Field(min_length=1)
    state_patch: Optional[List[PatchOp]] = Field(default=None, alias="statePatch")


class InStateless(InBase):
    type: Literal["stateless"] = "stateless"
    name: str = Field(min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)


class ServerMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    state_patch: Optional[List[PatchOp]] = Field(default=None, alias="statePatch")
    params: Dict[str, Any] = Field(default_factory=dict)


class InServer(InBase):
    type: Literal["server"] = "server"
    message: ServerMessage


IncomingMessage = Union[
    InJoin,
    InReconnect,
    InTransportError,
    InStateful,
    InStateless,
    InServer,
]


# =========================
# Outgoing (server -> relay)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutSynced(OutBase):
    type: Literal["synced"] = "synced"
    room_code: str
    song_state: str
    deferred_applied: int = 0


class OutVoteOnSong(OutBase):
    """Ask the relay to perform the voteOnSong socket action."""
    type: Literal["vote_on_song"] = "vote_on_song"
    room_uuid: str
    user_uuid: str
    song_votes: Dict[str, bool]


class OutChatMessage(OutBase):
    type: Literal["chat_message"] = "chat_message"
    room_uuid: str
    text: str


OutgoingEvent = Union[
    OutError,
    OutSynced,
    OutVoteOnSong,
    OutChatMessage,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "join": InJoin,
    "reconnect": InReconnect,
    "error": InTransportError,
    "stateful": InStateful,
    "stateless": InStateless,
    "server": InServer,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated frame model.
    Raises ValidationError if invalid.
    """
    t = payload.get("type") if isinstance(payload, dict) else None
    if not isinstance(t, str):
        raise _type_error("Missing/invalid type", t)

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise _type_error(f"Unknown frame type: {t}", t)

    return cls.model_validate(payload)


def _type_error(message: str, value: Any) -> ValidationError:
    return ValidationError.from_exception_data(
        title="IncomingMessage",
        line_errors=[{"type": PydanticCustomError("value_error", message), "loc": ("type",), "input": value}],
    )
