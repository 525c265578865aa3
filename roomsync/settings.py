# roomsync/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


class Settings(BaseModel):
    APP_NAME: str = "roomsync-server"

    # Redis (templates + feature toggles)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # Bot identity used for the automatic upvote
    BOT_UUID: str = ""

    # Song lifecycle
    SONG_TIMER_SEC: float = 90.0
    ANNOUNCE_SETTLE_SEC: float = 5.0

    # Raw frame log: OFF | ON | DEBUG
    FRAME_LOG_LEVEL: str = "OFF"
    FRAME_LOG_DIR: str = "logs"

    # Relay websocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173,null"


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "roomsync-server"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        BOT_UUID=os.getenv("BOT_UUID", ""),
        SONG_TIMER_SEC=float(os.getenv("SONG_TIMER_SEC", "90")),
        ANNOUNCE_SETTLE_SEC=float(os.getenv("ANNOUNCE_SETTLE_SEC", "5")),
        FRAME_LOG_LEVEL=os.getenv("FRAME_LOG_LEVEL", "OFF").upper(),
        FRAME_LOG_DIR=os.getenv("FRAME_LOG_DIR", "logs"),
        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,null",
        ),
    )
