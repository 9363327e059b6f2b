from pydantic import BaseModel, ConfigDict, Field
from typing import List


class CreateRoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    client_id: str = Field(alias="clientId")
    websocket_url: str
    signaling_server: str

class NetworkInfoResponse(BaseModel):
    local_ips: List[str]
    websocket_url: str
    mode: str

class HealthResponse(BaseModel):
    status: str
    mode: str
    rooms: int
    connections: int
    uptime: int
    local_ips: List[str]

class StatsResponse(BaseModel):
    total_connections: int
    active_connections: int
    active_rooms: int
    successful_pairs: int
    errors: int
    started_at: str
    uptime: int

class RoomDetailsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    created_at: str
    age_seconds: int
    sender_connected: bool
    receiver_connected: bool
    complete: bool
