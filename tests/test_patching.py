import copy

import pytest

from roomsync.store.models import PatchOp
from roomsync.store.patching import PatchError, apply_patches, ensure_path_exists


def test_ensure_path_creates_missing_containers():
    doc = {}
    ensure_path_exists(doc, "/nowPlaying/song/trackName")
    assert doc == {"nowPlaying": {"song": {"trackName": {}}}}


def test_ensure_path_replaces_falsy_but_keeps_truthy():
    doc = {"voteCounts": {"likes": 0, "stars": 4}, "settings": None}
    ensure_path_exists(doc, "/voteCounts/stars")
    ensure_path_exists(doc, "/settings/name")
    assert doc["voteCounts"]["stars"] == 4
    assert doc["settings"] == {"name": {}}


def test_ensure_path_is_idempotent():
    paths = ["/a/b/c", "/voteCounts/likes", "/djs/0/uuid", "/djs/5/uuid", "/x~1y/z"]
    for path in paths:
        once = {"voteCounts": {"likes": 0}, "djs": [{"uuid": "d1"}], "a": {"b": ""}}
        ensure_path_exists(once, path)
        twice = copy.deepcopy(once)
        ensure_path_exists(twice, path)
        assert once == twice


def test_ensure_path_does_not_grow_lists():
    doc = {"djs": [{"uuid": "d1"}]}
    ensure_path_exists(doc, "/djs/1")
    ensure_path_exists(doc, "/djs/-")
    assert doc == {"djs": [{"uuid": "d1"}]}


def test_ensure_path_keeps_empty_containers():
    doc = {"djs": [], "allUserData": {}, "settings": None}
    ensure_path_exists(doc, "/djs/0")
    ensure_path_exists(doc, "/allUserData/u1")
    ensure_path_exists(doc, "/settings/name")
    assert doc == {"djs": [], "allUserData": {"u1": {}}, "settings": {"name": {}}}


def test_first_dj_onto_empty_stage():
    doc = {"djs": [], "allUsers": [], "nowPlaying": None}
    out = apply_patches(
        doc,
        [
            {"op": "add", "path": "/djs/0", "value": {"uuid": "dj1"}},
            {"op": "add", "path": "/allUsers/-", "value": {"uuid": "dj1"}},
        ],
    )
    assert out["djs"] == [{"uuid": "dj1"}]
    assert out["allUsers"] == [{"uuid": "dj1"}]


def test_ensure_path_unescapes_pointer_segments():
    doc = {}
    ensure_path_exists(doc, "/a~1b/c~0d")
    assert doc == {"a/b": {"c~d": {}}}


def test_replace_vote_likes():
    doc = {"voteCounts": {"likes": 0, "dislikes": 0, "stars": 0}}
    out = apply_patches(doc, [{"op": "replace", "path": "/voteCounts/likes", "value": 5}])
    assert out == {"voteCounts": {"likes": 5, "dislikes": 0, "stars": 0}}
    # input untouched
    assert doc["voteCounts"]["likes"] == 0


def test_replace_into_sparse_document():
    out = apply_patches({}, [PatchOp(op="replace", path="/nowPlaying/song/trackName", value="Song")])
    assert out == {"nowPlaying": {"song": {"trackName": "Song"}}}


def test_add_remove_roundtrip_on_user_data():
    doc = {"allUserData": {}}
    out = apply_patches(doc, [{"op": "add", "path": "/allUserData/u1", "value": {"userProfile": {"nickname": "Bo"}}}])
    out = apply_patches(out, [{"op": "remove", "path": "/allUserData/u1"}])
    assert out == {"allUserData": {}}


def test_bad_batch_is_rejected_whole():
    doc = {"voteCounts": {"likes": 1, "dislikes": 0, "stars": 0}}
    before = copy.deepcopy(doc)
    with pytest.raises(PatchError):
        apply_patches(
            doc,
            [
                {"op": "replace", "path": "/voteCounts/likes", "value": 9},
                {"op": "remove", "path": "/does/not/exist"},
            ],
        )
    assert doc == before


def test_unknown_op_and_bad_path_are_patch_errors():
    with pytest.raises(PatchError):
        apply_patches({}, [{"op": "explode", "path": "/a"}])
    with pytest.raises(PatchError):
        apply_patches({}, [{"op": "add", "path": "no-slash", "value": 1}])
    with pytest.raises(PatchError):
        apply_patches({}, [{"op": "add", "value": 1}])
    with pytest.raises(PatchError):
        apply_patches({}, ["not an op"])


def test_scalar_in_the_way_fails():
    with pytest.raises(PatchError):
        apply_patches({"a": 5}, [{"op": "add", "path": "/a/b", "value": 1}])
