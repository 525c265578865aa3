from __future__ import annotations

from .announce import Announcer, format_message
from .tracker import SongTracker

__all__ = [
    "Announcer",
    "SongTracker",
    "format_message",
]
