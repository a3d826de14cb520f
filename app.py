from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from routers.rooms import rooms_router
from backend import RoomStore
from connections import ConnectionManager
from constants import LOG_LEVEL, LOG_FILE
from errors import InvalidPayload
from event_router import EventRouter
from membership import MembershipTracker
from schemas.events import Envelope
from logging_config import get_logger, setup_logging
import json

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app(store: RoomStore = None, **router_options) -> FastAPI:
    """Build the application with a fresh room store and connection registry.

    `router_options` are passed to EventRouter (strict_video_actions,
    evict_empty_rooms, default_username).
    """
    app = FastAPI(title="Watch Party Sync")

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    connections = ConnectionManager()
    app.state.room_store = store if store is not None else RoomStore()
    app.state.connections = connections
    app.state.membership = MembershipTracker(connections)
    app.state.event_router = EventRouter(
        app.state.room_store, connections, app.state.membership, **router_options
    )

    app.include_router(rooms_router)
    app.add_api_websocket_route("/ws", websocket_endpoint)

    logger.info("FastAPI application initialized")
    return app


async def websocket_endpoint(websocket: WebSocket):
    """Watch party websocket. Frames are JSON objects `{"event": name, "data": payload}`."""
    connections: ConnectionManager = websocket.app.state.connections
    router: EventRouter = websocket.app.state.event_router

    await websocket.accept()
    connection = connections.register(websocket)
    logger.info(f"New client: {connection.connection_id}")

    try:
        message_count = 0
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {connection.connection_id}")

            # Binary frames carrying JSON are accepted as well as text frames
            data = message.get("text")
            if data is None:
                data = message.get("bytes") or b""

            try:
                envelope = Envelope.model_validate(json.loads(data))
            except (ValueError, ValidationError) as e:
                error = InvalidPayload(f"Malformed frame: {e.__class__.__name__}")
                logger.info(f"Malformed frame from connection {connection.connection_id}")
                await connections.send(connection, "error", error.to_payload())
                continue

            await router.dispatch(connection, envelope.event, envelope.data)

    except WebSocketDisconnect:
        logger.info(f"Client disconnected: {connection.connection_id}")
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        await router.disconnect(connection)
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Error closing WebSocket: {e}")


app = create_app()
