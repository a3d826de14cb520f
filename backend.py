from collections import deque
from datetime import datetime
from typing import Optional

from constants import CHAT_HISTORY_LIMIT
from errors import RoomNotFound
from logging_config import get_logger
from schemas.events import ChatMessage, RoomSnapshot, VideoState

logger = get_logger(__name__)


class Room:
    def __init__(self, room_id: str, chat_limit: Optional[int] = None):
        self.room_id = room_id
        self.video = VideoState()
        # deque(maxlen=None) is unbounded
        self.chat: deque[ChatMessage] = deque(maxlen=chat_limit or None)
        self.created_at = datetime.now().isoformat()


class RoomStore:
    """In-memory room table: room id -> video state and chat history.

    One instance lives for the lifetime of the application and is shared by
    every connection. Handlers run one at a time, so no locking happens here.

    Chat history per room holds at most `chat_limit` messages (the
    CHAT_HISTORY_LIMIT setting, 500 by default); older messages are dropped
    first. A limit of 0 keeps every message.
    """

    def __init__(self, chat_limit: int = CHAT_HISTORY_LIMIT):
        self.chat_limit = chat_limit
        self._rooms: dict[str, Room] = {}
        logger.info(f"Initializing RoomStore (chat history limit: {chat_limit or 'unbounded'})")

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def room_ids(self) -> list[str]:
        return list(self._rooms)

    def get_or_create(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id, chat_limit=self.chat_limit)
            self._rooms[room_id] = room
            logger.info(f"Created room {room_id}")
        return room

    def get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            logger.debug(f"Room {room_id} not found")
            raise RoomNotFound(f"Room {room_id} not found")
        return room

    def delete(self, room_id: str) -> bool:
        room = self._rooms.pop(room_id, None)
        if room is None:
            return False
        logger.info(f"Deleted room {room_id} ({len(room.chat)} chat messages dropped)")
        return True

    def apply_video_load(self, room_id: str, video_id: str, video_url: str) -> VideoState:
        """Load a new video. Playback always restarts paused at zero."""
        room = self.get(room_id)
        room.video = VideoState(video_id=video_id, video_url=video_url, current_time=0, is_playing=False)
        logger.debug(f"Room {room_id} loaded video {video_id}")
        return room.video

    def apply_video_control(self, room_id: str, action: str, current_time: float) -> VideoState:
        """Apply play/pause/seek. Any other action leaves the state untouched."""
        room = self.get(room_id)
        video = room.video
        if action == "play":
            video.is_playing = True
            video.current_time = current_time
        elif action == "pause":
            video.is_playing = False
            video.current_time = current_time
        elif action == "seek":
            video.current_time = current_time
        else:
            logger.debug(f"Room {room_id}: action {action!r} does not change video state")
            return video
        logger.debug(f"Room {room_id} video {action} at {current_time}")
        return video

    def append_chat(self, room_id: str, username: str, message: str) -> ChatMessage:
        room = self.get(room_id)
        chat_message = ChatMessage(username=username, message=message)
        room.chat.append(chat_message)
        logger.debug(f"Room {room_id} chat from {username} ({len(room.chat)} messages)")
        return chat_message

    def snapshot(self, room_id: str) -> RoomSnapshot:
        room = self.get(room_id)
        return RoomSnapshot(
            video=room.video.model_copy(),
            chat=[message.model_copy() for message in room.chat],
        )
