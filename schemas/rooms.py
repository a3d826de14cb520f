from pydantic import BaseModel

from schemas.events import VideoState


class RoomSummary(BaseModel):
    room_id: str
    member_count: int
    video_id: str


class RoomDetailsResponse(BaseModel):
    room_id: str
    created_at: str
    members: list[str]
    member_count: int
    video: VideoState
    chat_length: int


class HealthResponse(BaseModel):
    status: str
    rooms: int
    connections: int
