# roomsync/transport/frame_log.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

LEVELS = ("OFF", "ON", "DEBUG")


class FrameLog:
    """
    Raw relay frame log.
    ON: one file per channel, entries appended.
    DEBUG: one numbered file per frame, named after the frame.
    """

    def __init__(self, level: str = "OFF", directory: str = "logs") -> None:
        self.level = level if level in LEVELS else "OFF"
        self.dir = Path(directory)
        self.counter = 0
        if self.level != "OFF":
            self.dir.mkdir(parents=True, exist_ok=True)

    def write(self, channel: str, raw: Dict[str, Any]) -> None:
        if self.level == "OFF":
            return
        try:
            with self.dir.joinpath(self._filename(channel, raw)).open("a", encoding="utf-8") as f:
                f.write(self._entry(raw))
        except OSError as e:
            logger.error("failed to write frame log for %s: %s", channel, e)

    def _filename(self, channel: str, raw: Dict[str, Any]) -> str:
        if self.level != "DEBUG":
            return f"{channel}.log"
        self.counter += 1
        name = _frame_name(raw)
        if name:
            return f"{self.counter:06d}_{channel}_{name}.log"
        return f"{self.counter:06d}_{channel}.log"

    def _entry(self, raw: Dict[str, Any]) -> str:
        ts = datetime.now(timezone.utc).isoformat()
        return f"{ts}: {json.dumps(raw, indent=2, ensure_ascii=False, default=str)}\n"


def _frame_name(raw: Dict[str, Any]) -> str:
    name = raw.get("name")
    if not name and isinstance(raw.get("message"), dict):
        name = raw["message"].get("name")
    if not isinstance(name, str):
        return ""
    return "".join(ch for ch in name if ch.isalnum() or ch in "-_")
