from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import HealthResponse, RoomDetailsResponse, RoomSummary
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


@rooms_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    state = request.app.state
    return HealthResponse(status="ok", rooms=len(state.room_store), connections=len(state.connections))


@rooms_router.get("/rooms", response_model=list[RoomSummary])
async def list_rooms(request: Request):
    store = request.app.state.room_store
    connections = request.app.state.connections
    summaries = []
    for room_id in store.room_ids():
        room = store.get(room_id)
        summaries.append(RoomSummary(
            room_id=room_id,
            member_count=connections.room_size(room_id),
            video_id=room.video.video_id,
        ))
    logger.debug(f"Listing {len(summaries)} rooms")
    return summaries


@rooms_router.get("/rooms/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get a read-only view of a room.

    Returns:
    - room_id: Room identifier
    - created_at: When the room was first joined
    - members: Display names of connected participants, in join order
    - member_count: Number of connections subscribed to the room
    - video: Current video state
    - chat_length: Number of chat messages held in history
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    store = request.app.state.room_store
    if room_id not in store:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    room = store.get(room_id)
    members = request.app.state.membership.members_of(room_id)
    return RoomDetailsResponse(
        room_id=room_id,
        created_at=room.created_at,
        members=members,
        member_count=request.app.state.connections.room_size(room_id),
        video=room.video,
        chat_length=len(room.chat),
    )
