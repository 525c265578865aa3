# roomsync/store/patching.py
from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Union

import jsonpatch
import jsonpointer

from roomsync.store.models import PatchOp

PatchLike = Union[PatchOp, Dict[str, Any]]


class PatchError(Exception):
    """A patch batch could not be applied; the source document is untouched."""


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def _is_vacant(value: Any) -> bool:
    return not value and not isinstance(value, (dict, list))


def ensure_path_exists(doc: Dict[str, Any], path: str) -> None:
    """
    Walk `path` from the root and put an empty object at every segment that is
    missing or a falsy scalar, so a following add/replace has somewhere to land.

    Containers are never replaced, empty ones included. Lists are only
    descended into at an existing index; list slots are never created here.
    """
    keys = path.split("/")
    keys.pop(0)  # leading "" before the first slash

    current: Any = doc
    for raw in keys:
        key = _unescape(raw)
        if isinstance(current, dict):
            if _is_vacant(current.get(key)):
                current[key] = {}
            current = current[key]
        elif isinstance(current, list):
            if not key.isdigit() or int(key) >= len(current):
                return
            idx = int(key)
            if _is_vacant(current[idx]):
                current[idx] = {}
            current = current[idx]
        else:
            # scalar in the way, leave it for the patch to reject
            return


def _as_op(p: PatchLike) -> Dict[str, Any]:
    if isinstance(p, PatchOp):
        return p.as_patch()
    if isinstance(p, dict):
        return dict(p)
    raise PatchError(f"Patch operation must be an object, got {type(p).__name__}")


def apply_patches(doc: Dict[str, Any], patches: Iterable[PatchLike]) -> Dict[str, Any]:
    """
    Apply a whole batch to a copy of `doc` and return the copy.
    Raises PatchError on the first bad operation; `doc` itself is never modified.
    """
    ops: List[Dict[str, Any]] = [_as_op(p) for p in patches]
    working: Any = copy.deepcopy(doc)

    for i, op in enumerate(ops):
        path = op.get("path")
        if not isinstance(path, str):
            raise PatchError(f"op #{i}: missing/invalid path")
        try:
            if op.get("op") in ("add", "replace") and isinstance(working, dict):
                ensure_path_exists(working, path)
            working = jsonpatch.apply_patch(working, [op], in_place=True)
        except (jsonpatch.JsonPatchException, jsonpointer.JsonPointerException) as e:
            raise PatchError(f"op #{i} {op.get('op')} {path}: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise PatchError(f"op #{i} {op.get('op')} {path}: {e!r}") from e

    if not isinstance(working, dict):
        raise PatchError("Patch replaced the document root with a non-object")
    return working
