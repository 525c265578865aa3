# roomsync/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from roomsync.domain.services import build_room_services
from roomsync.domain.session import SessionRegistry
from roomsync.settings import get_settings
from roomsync.store.redis_repo import RedisRepo
from roomsync.transport.admin import router as admin_router
from roomsync.transport.frame_log import FrameLog
from roomsync.transport.outbound import RelayOutbound
from roomsync.transport.ws import router as ws_router
from roomsync.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        app.state.redis = r
        app.state.repo = RedisRepo(r)
        app.state.wsman = WSManager()
        app.state.frame_log = FrameLog(settings.FRAME_LOG_LEVEL, settings.FRAME_LOG_DIR)

        outbound = RelayOutbound(app.state.wsman)

        def _new_room(room_code: str):
            return build_room_services(
                room_code,
                bot_uuid=settings.BOT_UUID,
                votes=outbound,
                chat=outbound,
                content=app.state.repo,
                song_timer_sec=settings.SONG_TIMER_SEC,
                announce_settle_sec=settings.ANNOUNCE_SETTLE_SEC,
            )

        app.state.sessions = SessionRegistry(_new_room)
        await r.ping()
        logger.info("%s ready (redis=%s, frame log=%s)", settings.APP_NAME, settings.REDIS_URL, settings.FRAME_LOG_LEVEL)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        app.state.sessions.close_all()
        r: Redis = app.state.redis
        await r.close()

    @app.get("/health")
    async def health():
        r: Redis = app.state.redis
        pong = await r.ping()
        return {"ok": True, "redis": str(pong), "rooms": len(app.state.sessions.room_codes())}

    app.include_router(ws_router)
    app.include_router(admin_router)
    return app


app = create_app()
