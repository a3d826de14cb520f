import pytest

from backend import RoomStore
from connections import ConnectionManager
from event_router import EventRouter
from membership import MembershipTracker

from helpers import FakeWebSocket, run


@pytest.fixture
def store():
    return RoomStore(chat_limit=0)


@pytest.fixture
def connections():
    return ConnectionManager()


@pytest.fixture
def membership(connections):
    return MembershipTracker(connections)


@pytest.fixture
def router(store, connections, membership):
    return EventRouter(store, connections, membership, strict_video_actions=False, evict_empty_rooms=True)


@pytest.fixture
def connect(connections):
    def _connect(fail=False):
        return connections.register(FakeWebSocket(fail=fail))
    return _connect


@pytest.fixture
def join(router):
    def _join(connection, room_id, username=None):
        payload = {"roomId": room_id}
        if username is not None:
            payload["username"] = username
        run(router.dispatch(connection, "joinRoom", payload))
    return _join
