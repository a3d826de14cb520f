from typing import Protocol

from connections import ConnectionManager
from logging_config import get_logger

logger = get_logger(__name__)


class Membership(Protocol):
    def members_of(self, room_id: str) -> list[str]:
        ...

    async def broadcast_members(self, room_id: str) -> list[str]:
        ...


class MembershipTracker:
    """Derives a room's display names from the connections subscribed to it."""

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    def members_of(self, room_id: str) -> list[str]:
        return [conn.username for conn in self.connections.connections_in(room_id) if conn.username]

    async def broadcast_members(self, room_id: str) -> list[str]:
        # computed once so every recipient sees the same list
        members = self.members_of(room_id)
        await self.connections.emit_to_room(room_id, "roomMembers", members)
        logger.debug(f"Room {room_id} members: {members}")
        return members
