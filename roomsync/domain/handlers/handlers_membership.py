# roomsync/domain/handlers/handlers_membership.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from roomsync.domain.services import RoomServices
from roomsync.domain.users import UserNotFound
from roomsync.store.models import UserProfile
from roomsync.transport.protocols import InStateful

logger = logging.getLogger(__name__)

USER_DATA_PREFIX = "/allUserData/"


def _user_patch(msg: InStateful, op: str) -> Optional[Dict[str, Any]]:
    for p in msg.state_patch or []:
        if p.op == op and p.path.startswith(USER_DATA_PREFIX):
            return p.as_patch()
    return None


def _uuid_from_path(path: str) -> str:
    # /allUserData/<uuid>[/...]
    parts = path.split("/")
    return parts[2] if len(parts) > 2 else ""


async def handle_user_joined(state: Dict[str, Any], msg: InStateful, services: RoomServices) -> None:
    patch = _user_patch(msg, "add")
    if patch is None:
        logger.debug("room=%s no user data patch in userJoined", services.room.room_code)
        return

    uuid = _uuid_from_path(patch["path"])
    value = patch.get("value") or {}
    profile_raw = value.get("userProfile") if isinstance(value, dict) else None
    profile_raw = profile_raw if isinstance(profile_raw, dict) else {}
    profile = UserProfile(uuid=uuid, nickname=profile_raw.get("nickname"), avatar_id=profile_raw.get("avatarId"))

    if not profile.uuid:
        logger.warning("room=%s no user UUID in patch path %s", services.room.room_code, patch["path"])
        return
    if not profile.nickname:
        logger.warning("room=%s no nickname for joining user %s", services.room.room_code, uuid)
        return

    try:
        role = services.users.get_role(uuid)
    except UserNotFound:
        role = "user"
    logger.info("room=%s user joined: %s (%s, role=%s)", services.room.room_code, profile.nickname, uuid, role)

    if profile.avatar_id == "ghost":
        logger.debug("room=%s skipping welcome for ghost user %s", services.room.room_code, uuid)
        return
    if uuid == services.room.bot_uuid:
        return

    await services.announcer.welcome(profile)


async def handle_user_left(state: Dict[str, Any], msg: InStateful, services: RoomServices) -> None:
    patch = _user_patch(msg, "remove")
    if patch is None:
        logger.debug("room=%s no user data remove patch in userLeft", services.room.room_code)
        return
    logger.info("room=%s user left: %s", services.room.room_code, _uuid_from_path(patch["path"]))


async def handle_added_dj(state: Dict[str, Any], msg: InStateful, services: RoomServices) -> None:
    djs = state.get("djs") or []
    logger.info("room=%s dj added, %d on stage", services.room.room_code, len(djs))


async def handle_removed_dj(state: Dict[str, Any], msg: InStateful, services: RoomServices) -> None:
    djs = state.get("djs") or []
    logger.info("room=%s dj removed, %d on stage", services.room.room_code, len(djs))
