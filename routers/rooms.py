from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import CreateRoomResponse, HealthResponse, NetworkInfoResponse, RoomDetailsResponse, StatsResponse
import uuid
from constants import ROOM_ID_LENGTH
from network import get_local_ips, websocket_url
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


def generate_room_id() -> str:
    return uuid.uuid4().hex[:ROOM_ID_LENGTH].upper()


@rooms_router.post("/create-room", response_model=CreateRoomResponse)
async def create_room(request: Request):
    # Issues identifiers only. The room itself is created when the first peer joins over the socket.
    settings = request.app.state.settings
    client_host = request.client.host if request.client else "unknown"
    room_id = generate_room_id()
    client_id = str(uuid.uuid4())
    logger.info(f"Room id {room_id} issued to {client_host}")

    return CreateRoomResponse(
        room_id=room_id,
        client_id=client_id,
        websocket_url=websocket_url(settings["mode"], settings["host"], settings["port"]),
        signaling_server=f"{settings['host']}:{settings['port']}",
    )


@rooms_router.get("/network-info", response_model=NetworkInfoResponse)
async def network_info(request: Request):
    """Local network addresses, used by the display to build the pairing QR code."""
    settings = request.app.state.settings
    return NetworkInfoResponse(
        local_ips=get_local_ips(),
        websocket_url=websocket_url(settings["mode"], settings["host"], settings["port"]),
        mode=settings["mode"],
    )


@rooms_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    presence = request.app.state.presence
    return HealthResponse(
        status="ok",
        mode=request.app.state.settings["mode"],
        rooms=len(presence.registry),
        connections=len(presence.connections),
        uptime=presence.stats.uptime_seconds,
        local_ips=get_local_ips(),
    )


@rooms_router.get("/stats", response_model=StatsResponse)
async def stats(request: Request):
    presence = request.app.state.presence
    return StatsResponse(**presence.stats.snapshot(
        active_rooms=len(presence.registry),
        active_connections=len(presence.connections),
    ))


@rooms_router.get("/rooms/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Occupancy of a live room.

    Returns 404 once both peers have left, since empty rooms are removed immediately.
    """
    registry = request.app.state.presence.registry
    room = registry.get(room_id)
    if room is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_id=room.room_id,
        created_at=room.created_at.isoformat(),
        age_seconds=room.age_seconds,
        sender_connected=room.sender is not None,
        receiver_connected=room.receiver is not None,
        complete=registry.is_complete(room),
    )
