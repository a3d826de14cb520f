import asyncio
import enum
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import WebSocket

from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(enum.Enum):
    CONNECTED = "connected"
    JOINED = "joined"
    DISCONNECTED = "disconnected"


@dataclass
class Connection:
    websocket: WebSocket
    connection_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    username: Optional[str] = None
    room_id: Optional[str] = None
    state: ConnectionState = ConnectionState.CONNECTED

    def is_joined_to(self, room_id: str) -> bool:
        return self.state is ConnectionState.JOINED and self.room_id == room_id


class ConnectionManager:
    """Tracks live websocket connections and which room each one is subscribed to.

    Each connection belongs to at most one room. Room subscriptions keep
    insertion order, so membership lists come out in join order.
    """

    def __init__(self):
        self._connections: dict[str, Connection] = {}
        # Format: {room_id: {connection_id: None}}
        self._rooms: dict[str, dict[str, None]] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def register(self, websocket: WebSocket) -> Connection:
        connection = Connection(websocket=websocket)
        self._connections[connection.connection_id] = connection
        logger.info(f"Connection {connection.connection_id} registered (total: {len(self._connections)})")
        return connection

    def unregister(self, connection: Connection) -> Optional[str]:
        """Drop a connection. Returns the room it was subscribed to, if any."""
        room_id = self.unsubscribe(connection)
        self._connections.pop(connection.connection_id, None)
        connection.state = ConnectionState.DISCONNECTED
        logger.info(f"Connection {connection.connection_id} unregistered (remaining: {len(self._connections)})")
        return room_id

    def subscribe(self, connection: Connection, room_id: str):
        self._rooms.setdefault(room_id, {})[connection.connection_id] = None
        connection.room_id = room_id
        connection.state = ConnectionState.JOINED
        logger.debug(f"Connection {connection.connection_id} subscribed to room {room_id} "
                     f"(room connections: {len(self._rooms[room_id])})")

    def unsubscribe(self, connection: Connection) -> Optional[str]:
        room_id = connection.room_id
        if room_id is None:
            return None
        members = self._rooms.get(room_id)
        if members is not None:
            members.pop(connection.connection_id, None)
            if not members:
                del self._rooms[room_id]
        connection.room_id = None
        connection.state = ConnectionState.CONNECTED
        logger.debug(f"Connection {connection.connection_id} unsubscribed from room {room_id}")
        return room_id

    def connections_in(self, room_id: str) -> list[Connection]:
        return [
            self._connections[conn_id]
            for conn_id in self._rooms.get(room_id, {})
            if conn_id in self._connections
        ]

    def room_size(self, room_id: str) -> int:
        return len(self._rooms.get(room_id, {}))

    async def send(self, connection: Connection, event: str, data: Any) -> bool:
        """Send one frame to one connection. Failures are logged, not raised."""
        try:
            await connection.websocket.send_text(json.dumps({"event": event, "data": data}))
            return True
        except Exception as e:
            logger.warning(f"Error sending {event} to connection {connection.connection_id}: {e}")
            return False

    async def emit_to_room(self, room_id: str, event: str, data: Any, exclude: Optional[Connection] = None) -> int:
        """Send to every connection in the room except `exclude`. Returns the number of recipients."""
        recipients = [conn for conn in self.connections_in(room_id) if conn is not exclude]
        if not recipients:
            return 0
        logger.debug(f"Broadcasting {event} to {len(recipients)} connections in room {room_id}")
        await asyncio.gather(*(self.send(conn, event, data) for conn in recipients))
        return len(recipients)
