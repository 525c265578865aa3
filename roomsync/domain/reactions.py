# roomsync/domain/reactions.py
from __future__ import annotations

from enum import Enum
from typing import Any


class ReactionOutcome(str, Enum):
    STAR_VOTE = "STAR_VOTE"
    IGNORED = "IGNORED"


# purple heart, star + VS16 (the "snag" reactions)
STAR_REACTIONS = frozenset({"\U0001F49C", "\u2B50\uFE0F"})


def classify_reaction(symbol: Any) -> ReactionOutcome:
    """Exact, case-sensitive allow-list match. Anything else is ignored."""
    if isinstance(symbol, str) and symbol in STAR_REACTIONS:
        return ReactionOutcome.STAR_VOTE
    return ReactionOutcome.IGNORED
