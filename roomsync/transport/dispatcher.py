# roomsync/transport/dispatcher.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from roomsync.domain.common.types import (
    MEMBERSHIP_EVENTS,
    NOTHING_PLAYING_ERROR,
    VOTE_UPDATE_EVENT,
)
from roomsync.domain.handlers import (
    MEMBERSHIP_HANDLERS,
    STATEFUL_HANDLERS,
    STATELESS_HANDLERS,
    handle_nothing_playing,
)
from roomsync.domain.services import RoomServices
from roomsync.transport.protocols import (
    parse_incoming,
    OutError,
    OutgoingEvent,
    OutSynced,
    InJoin,
    InReconnect,
    InTransportError,
    InStateful,
    InStateless,
    InServer,
)

logger = logging.getLogger(__name__)

DispatchResult = List[Dict[str, Any]]
# events sent back to the relay connection that delivered the frame


async def dispatch_message(
    *,
    app,
    room_code: str,
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this once per relay frame.
    - Parses + classifies the frame (stateful / stateless / server / lifecycle)
    - Applies the frame's state patch, if any, before any handler runs
    - Routes to the named handler; unknown names are skipped

    A failing handler is logged and reported; it never stops the next frame.
    """
    frame_log = getattr(app.state, "frame_log", None)
    if frame_log is not None and isinstance(raw, dict):
        frame_log.write(str(raw.get("type", "unknown")), raw)

    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        logger.warning("room=%s bad frame: %s", room_code, e)
        return _dump([OutError(code="BAD_MESSAGE", message=str(e))])

    services: RoomServices = app.state.sessions.get_or_create(room_code)

    try:
        # ---- Transport lifecycle ----
        if isinstance(msg, InJoin):
            return _dump(_handle_join(services, msg))

        if isinstance(msg, InReconnect):
            return _dump(_handle_reconnect(services, msg))

        if isinstance(msg, InTransportError):
            await _handle_transport_error(services, msg)
            return []

        # ---- Room channels ----
        if isinstance(msg, InStateful):
            await _handle_stateful(services, msg)
            return []

        if isinstance(msg, InStateless):
            await _handle_stateless(services, msg)
            return []

        if isinstance(msg, InServer):
            await _handle_server(services, msg)
            return []
    except Exception as e:
        logger.exception("room=%s handler failed for %s frame", room_code, msg.type)
        return _dump([OutError(code="HANDLER_FAILED", message=str(e))])

    return _dump([OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}")])


def _handle_join(services: RoomServices, msg: InJoin) -> List[OutgoingEvent]:
    store = services.room.store
    deferred = store.deferred_count
    store.install(msg.state, replay_deferred=True)
    services.songs.sync_from_store()
    logger.info("room=%s joined, state keys: %s", services.room.room_code, ", ".join(sorted(store.document.keys())))
    return [OutSynced(room_code=services.room.room_code, song_state=services.room.song_state, deferred_applied=deferred)]


def _handle_reconnect(services: RoomServices, msg: InReconnect) -> List[OutgoingEvent]:
    store = services.room.store
    store.install(msg.state, replay_deferred=False)
    services.songs.sync_from_store()
    logger.info("room=%s resynced after reconnect", services.room.room_code)
    return [OutSynced(room_code=services.room.room_code, song_state=services.room.song_state)]


async def _handle_transport_error(services: RoomServices, msg: InTransportError) -> None:
    if msg.reason == NOTHING_PLAYING_ERROR:
        await handle_nothing_playing(services)
        return
    logger.warning("room=%s socket error: %s", services.room.room_code, msg.reason)


async def _handle_stateful(services: RoomServices, msg: InStateful) -> None:
    store = services.room.store
    if msg.state_patch is not None:
        store.apply(msg.state_patch, source=msg.name)

    if not store.ready:
        logger.debug("room=%s state not available yet, skipping %s handler", services.room.room_code, msg.name)
        return

    if msg.name == VOTE_UPDATE_EVENT:
        # archived-record merge is driven by the server notification
        return

    if msg.name in MEMBERSHIP_EVENTS:
        handler = MEMBERSHIP_HANDLERS.get(msg.name)
        if handler is not None:
            await handler(store.document, msg, services)
        return

    handler = STATEFUL_HANDLERS.get(msg.name)
    if handler is None:
        logger.debug("room=%s no handler for stateful %s", services.room.room_code, msg.name)
        return
    await handler(services)


async def _handle_stateless(services: RoomServices, msg: InStateless) -> None:
    if not services.room.store.ready:
        logger.debug("room=%s state not available yet, skipping stateless %s", services.room.room_code, msg.name)
        return

    handler = STATELESS_HANDLERS.get(msg.name)
    if handler is None:
        logger.debug("room=%s no handler for stateless %s", services.room.room_code, msg.name)
        return
    await handler(msg, services)


async def _handle_server(services: RoomServices, msg: InServer) -> None:
    inner = msg.message
    if inner.state_patch is not None:
        services.room.store.apply(inner.state_patch, source=inner.name)

    if inner.name == VOTE_UPDATE_EVENT:
        services.songs.merge_vote_update(inner.state_patch or [])
        return

    logger.debug("room=%s server message %s", services.room.room_code, inner.name)


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump() for e in events]
