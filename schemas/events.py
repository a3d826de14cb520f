from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class VideoState(WireModel):
    video_id: str = ""
    video_url: str = ""
    current_time: float = Field(default=0, ge=0)
    is_playing: bool = False


class ChatMessage(WireModel):
    username: str
    message: str


class RoomSnapshot(WireModel):
    video: VideoState
    chat: list[ChatMessage]


# Inbound events

class JoinRoomEvent(WireModel):
    room_id: str = Field(min_length=1)
    username: Optional[str] = None


class ChatMessageEvent(WireModel):
    room_id: str = Field(min_length=1)
    message: str


class VideoLoadEvent(WireModel):
    room_id: str = Field(min_length=1)
    video_id: str
    video_url: str


class VideoControlEvent(WireModel):
    room_id: str = Field(min_length=1)
    action: str
    # strict: JSON booleans are not playback positions
    current_time: float = Field(ge=0, strict=True)


INBOUND_EVENTS = {
    "joinRoom": JoinRoomEvent,
    "chatMessage": ChatMessageEvent,
    "videoLoad": VideoLoadEvent,
    "videoControl": VideoControlEvent,
}


# Outbound relays

class VideoLoadRelay(WireModel):
    video_id: str
    video_url: str


class VideoControlRelay(WireModel):
    room_id: str
    action: str
    current_time: float


class Envelope(BaseModel):
    """A single websocket frame: a named event and its payload."""

    event: str = Field(min_length=1)
    data: dict = Field(default_factory=dict)
