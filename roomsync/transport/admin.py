# roomsync/transport/admin.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from roomsync.domain.users import ROLE_LEVELS, UserNotFound
from roomsync.store.redis_repo import DEFAULT_TEMPLATES, UnknownFeature

router = APIRouter(prefix="/admin", tags=["admin"])


class FeatureToggle(BaseModel):
    enabled: bool


class TemplateUpdate(BaseModel):
    template: str


def _services_or_404(request: Request, room_code: str):
    services = request.app.state.sessions.get(room_code)
    if services is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return services


@router.get("/rooms")
async def list_rooms(request: Request):
    """
    List mirrored rooms (debug/admin).
    """
    sessions = request.app.state.sessions
    rooms = []
    for code in sessions.room_codes():
        services = sessions.get(code)
        if services is None:
            continue
        rooms.append(services.room.summary())
    return {"rooms": rooms}


@router.get("/rooms/{room_code}/state")
async def room_state(room_code: str, request: Request):
    services = _services_or_404(request, room_code)
    return {"room_code": room_code, "state": services.room.store.document}


@router.get("/rooms/{room_code}/previous-song")
async def previous_song(room_code: str, request: Request):
    services = _services_or_404(request, room_code)
    record = services.room.previous_song
    return {"room_code": room_code, "previous_song": record.model_dump() if record else None}


@router.get("/rooms/{room_code}/users/{uuid}/role")
async def user_role(room_code: str, uuid: str, request: Request):
    services = _services_or_404(request, room_code)
    try:
        role = services.users.get_role(uuid)
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")
    return {"uuid": uuid, "role": role, "level": ROLE_LEVELS[role]}


@router.post("/rooms/{room_code}/close")
async def close_room(room_code: str, request: Request):
    """
    Drop a room session: timers cancelled, mirrored state discarded.
    """
    if not request.app.state.sessions.close(room_code):
        raise HTTPException(status_code=404, detail="Room not found")
    return {"ok": True, "room_code": room_code}


# ----------------------------
# Templates / features (Redis)
# ----------------------------
@router.get("/rooms/{room_code}/features")
async def get_features(room_code: str, request: Request):
    repo = request.app.state.repo
    return await repo.get_features(room_code)


@router.post("/rooms/{room_code}/features/{name}")
async def set_feature(room_code: str, name: str, body: FeatureToggle, request: Request):
    repo = request.app.state.repo
    try:
        changed = await repo.set_feature_enabled(room_code, name, body.enabled)
    except UnknownFeature:
        raise HTTPException(status_code=404, detail=f"Unknown feature: {name}")
    return {"ok": True, "feature": name, "enabled": body.enabled, "changed": changed}


@router.get("/rooms/{room_code}/templates")
async def get_templates(room_code: str, request: Request):
    repo = request.app.state.repo
    return {"templates": await repo.get_templates(room_code)}


@router.put("/rooms/{room_code}/templates/{key}")
async def set_template(room_code: str, key: str, body: TemplateUpdate, request: Request):
    if key not in DEFAULT_TEMPLATES:
        raise HTTPException(status_code=404, detail=f"Unknown template: {key}")
    repo = request.app.state.repo
    await repo.set_template(room_code, key, body.template)
    return {"ok": True, "key": key}
