import asyncio
from typing import Any

from pydantic import ValidationError

from backend import RoomStore
from connections import Connection, ConnectionManager
from constants import DEFAULT_USERNAME, EVICT_EMPTY_ROOMS, STRICT_VIDEO_ACTIONS, VIDEO_ACTIONS
from errors import InvalidAction, InvalidPayload, RoomNotFound, UnknownEvent, WatchPartyError
from logging_config import get_logger
from membership import Membership
from schemas.events import (
    INBOUND_EVENTS,
    ChatMessageEvent,
    JoinRoomEvent,
    VideoControlEvent,
    VideoControlRelay,
    VideoLoadEvent,
    VideoLoadRelay,
)

logger = get_logger(__name__)


class EventRouter:
    """Applies inbound room events to the store and fans the results out.

    Every event runs under a single lock: its state change and all of its
    outbound sends finish before the next event starts, so concurrent edits
    to one room resolve by processing order (last write wins).
    """

    def __init__(
        self,
        store: RoomStore,
        connections: ConnectionManager,
        membership: Membership,
        strict_video_actions: bool = STRICT_VIDEO_ACTIONS,
        evict_empty_rooms: bool = EVICT_EMPTY_ROOMS,
        default_username: str = DEFAULT_USERNAME,
    ):
        self.store = store
        self.connections = connections
        self.membership = membership
        self.strict_video_actions = strict_video_actions
        self.evict_empty_rooms = evict_empty_rooms
        self.default_username = default_username
        self._lock = asyncio.Lock()
        self._handlers = {
            "joinRoom": self.handle_join_room,
            "chatMessage": self.handle_chat_message,
            "videoLoad": self.handle_video_load,
            "videoControl": self.handle_video_control,
        }

    async def dispatch(self, connection: Connection, event: str, data: Any):
        """Handle one inbound event. Errors go back to the sender as an `error` event."""
        async with self._lock:
            try:
                handler = self._handlers.get(event)
                if handler is None:
                    raise UnknownEvent(f"Unknown event {event!r}")
                try:
                    payload = INBOUND_EVENTS[event].model_validate(data)
                except ValidationError as e:
                    raise InvalidPayload(f"Invalid {event} payload: {e.error_count()} validation error(s)")
                logger.debug(f"Dispatching {event} from connection {connection.connection_id}")
                await handler(connection, payload)
            except WatchPartyError as e:
                if e.event is None:
                    e.event = event
                logger.info(f"Rejected {event} from connection {connection.connection_id}: {e.kind}: {e.message}")
                await self.connections.send(connection, "error", e.to_payload())

    async def disconnect(self, connection: Connection):
        async with self._lock:
            room_id = self.connections.unregister(connection)
            if room_id is not None:
                logger.info(f"Connection {connection.connection_id} ({connection.username}) left room {room_id}")
                await self._room_changed(room_id)

    async def handle_join_room(self, connection: Connection, payload: JoinRoomEvent):
        room_id = payload.room_id
        if connection.username is None:
            connection.username = payload.username or self.default_username

        previous_room = connection.room_id
        if previous_room is not None and previous_room != room_id:
            self.connections.unsubscribe(connection)
            logger.info(f"Connection {connection.connection_id} switching from room {previous_room} to {room_id}")
            await self._room_changed(previous_room)

        self.store.get_or_create(room_id)
        self.connections.subscribe(connection, room_id)
        logger.info(f"User {connection.username} ({connection.connection_id}) joined room {room_id}")

        await self.connections.send(connection, "roomData", self.store.snapshot(room_id).to_wire())
        await self.membership.broadcast_members(room_id)

    async def handle_chat_message(self, connection: Connection, payload: ChatMessageEvent):
        self._require_joined(connection, payload.room_id)
        chat_message = self.store.append_chat(payload.room_id, connection.username, payload.message)
        await self.connections.emit_to_room(
            payload.room_id, "chatMessage", chat_message.to_wire(), exclude=connection
        )

    async def handle_video_load(self, connection: Connection, payload: VideoLoadEvent):
        self._require_joined(connection, payload.room_id)
        self.store.apply_video_load(payload.room_id, payload.video_id, payload.video_url)
        relay = VideoLoadRelay(video_id=payload.video_id, video_url=payload.video_url)
        await self.connections.emit_to_room(payload.room_id, "videoLoad", relay.to_wire(), exclude=connection)

    async def handle_video_control(self, connection: Connection, payload: VideoControlEvent):
        self._require_joined(connection, payload.room_id)
        if payload.action not in VIDEO_ACTIONS:
            if self.strict_video_actions:
                raise InvalidAction(f"Unsupported video action {payload.action!r}")
            logger.warning(f"Relaying unrecognized video action {payload.action!r} in room {payload.room_id}")
        self.store.apply_video_control(payload.room_id, payload.action, payload.current_time)
        relay = VideoControlRelay(
            room_id=payload.room_id, action=payload.action, current_time=payload.current_time
        )
        await self.connections.emit_to_room(payload.room_id, "videoControl", relay.to_wire(), exclude=connection)

    def _require_joined(self, connection: Connection, room_id: str):
        if not connection.is_joined_to(room_id) or room_id not in self.store:
            raise RoomNotFound(f"Connection has not joined room {room_id}")

    async def _room_changed(self, room_id: str):
        """Membership of `room_id` shrank: evict it if empty, otherwise rebroadcast members."""
        if self.connections.room_size(room_id) == 0:
            if self.evict_empty_rooms:
                self.store.delete(room_id)
            return
        await self.membership.broadcast_members(room_id)
