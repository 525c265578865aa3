# roomsync/domain/tally.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from roomsync.domain.common.types import VoteField
from roomsync.store.models import PatchOp, VoteTally, count_value

VOTE_FIELDS = ("likes", "dislikes", "stars")
VOTE_COUNTS_PATH = "/voteCounts"


def merge_field(tally: VoteTally, field: VoteField, value: Any) -> VoteTally:
    """
    Fold one remote count into a tally.
    likes/dislikes follow the remote value; stars only move up, so replaying or
    reordering star updates gives the same result.
    """
    if field not in VOTE_FIELDS:
        return tally
    n = count_value(value)
    if field == "stars":
        n = max(tally.stars, n)
    return tally.model_copy(update={field: n})


def add_star(tally: VoteTally) -> VoteTally:
    return tally.model_copy(update={"stars": tally.stars + 1})


def vote_updates_from_patch(patches: Iterable[Any]) -> Dict[str, Any]:
    """
    Pull voteCounts values out of a diff: `/voteCounts/<field>` replace/add ops
    and whole `/voteCounts` replaces. Later ops win.
    """
    out: Dict[str, Any] = {}
    for p in patches:
        op = _op_dict(p)
        if op is None or op.get("op") not in ("replace", "add"):
            continue
        path = op.get("path")
        value = op.get("value")
        if path == VOTE_COUNTS_PATH and isinstance(value, dict):
            for f in VOTE_FIELDS:
                if f in value:
                    out[f] = value[f]
            continue
        if isinstance(path, str) and path.startswith(VOTE_COUNTS_PATH + "/"):
            field = path[len(VOTE_COUNTS_PATH) + 1:]
            if field in VOTE_FIELDS:
                out[field] = value
    return out


def _op_dict(p: Any) -> Optional[Dict[str, Any]]:
    if isinstance(p, PatchOp):
        return p.as_patch()
    if isinstance(p, dict):
        return p
    return None
