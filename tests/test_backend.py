import pytest

from backend import RoomStore
from constants import CHAT_HISTORY_LIMIT
from errors import RoomNotFound


def test_get_or_create_is_idempotent(store):
    first = store.get_or_create("R1")
    second = store.get_or_create("R1")

    assert first is second
    assert len(store) == 1
    assert first.video.model_dump() == {
        "video_id": "",
        "video_url": "",
        "current_time": 0,
        "is_playing": False,
    }
    assert list(first.chat) == []


def test_video_load_resets_playback(store):
    store.get_or_create("R1")
    store.apply_video_control("R1", "play", 42.5)

    video = store.apply_video_load("R1", "v2", "u2")

    assert video.video_id == "v2"
    assert video.video_url == "u2"
    assert video.current_time == 0
    assert video.is_playing is False
    assert store.get("R1").video == video


def test_play_then_seek_keeps_playing(store):
    store.get_or_create("R1")
    store.apply_video_control("R1", "play", 5)
    video = store.apply_video_control("R1", "seek", 9)

    assert video.is_playing is True
    assert video.current_time == 9


def test_play_then_pause(store):
    store.get_or_create("R1")
    store.apply_video_control("R1", "play", 5)
    video = store.apply_video_control("R1", "pause", 7)

    assert video.is_playing is False
    assert video.current_time == 7


def test_unknown_action_leaves_state_untouched(store):
    store.get_or_create("R1")
    store.apply_video_control("R1", "play", 3)

    video = store.apply_video_control("R1", "rewind", 100)

    assert video.is_playing is True
    assert video.current_time == 3


def test_append_chat_keeps_arrival_order(store):
    store.get_or_create("R1")
    store.append_chat("R1", "alice", "one")
    store.append_chat("R1", "bob", "two")

    snapshot = store.snapshot("R1")
    assert [(m.username, m.message) for m in snapshot.chat] == [("alice", "one"), ("bob", "two")]


def test_chat_history_evicts_oldest_when_bounded():
    store = RoomStore(chat_limit=2)
    store.get_or_create("R1")
    for text in ("a", "b", "c"):
        store.append_chat("R1", "alice", text)

    assert [m.message for m in store.snapshot("R1").chat] == ["b", "c"]


def test_snapshot_is_detached_from_live_state(store):
    store.get_or_create("R1")
    snapshot = store.snapshot("R1")

    store.apply_video_load("R1", "abc", "http://x/abc")
    store.append_chat("R1", "alice", "hi")

    assert snapshot.video.video_id == ""
    assert snapshot.chat == []


def test_snapshot_wire_format(store):
    store.get_or_create("R1")
    store.apply_video_load("R1", "abc", "http://x/abc")
    store.append_chat("R1", "alice", "hi")

    assert store.snapshot("R1").to_wire() == {
        "video": {"videoId": "abc", "videoUrl": "http://x/abc", "currentTime": 0, "isPlaying": False},
        "chat": [{"username": "alice", "message": "hi"}],
    }


@pytest.mark.parametrize("mutate", [
    lambda s: s.apply_video_load("missing", "v", "u"),
    lambda s: s.apply_video_control("missing", "play", 1),
    lambda s: s.append_chat("missing", "alice", "hi"),
    lambda s: s.snapshot("missing"),
])
def test_mutators_raise_room_not_found(store, mutate):
    with pytest.raises(RoomNotFound):
        mutate(store)
    assert "missing" not in store


def test_delete(store):
    store.get_or_create("R1")

    assert store.delete("R1") is True
    assert store.delete("R1") is False
    assert store.room_ids() == []


def test_default_chat_limit_comes_from_settings():
    store = RoomStore()
    room = store.get_or_create("R1")

    assert store.chat_limit == CHAT_HISTORY_LIMIT
    assert room.chat.maxlen == (CHAT_HISTORY_LIMIT or None)
