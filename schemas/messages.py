from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# Client -> server

class InboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinRoomMessage(InboundMessage):
    room_id: str = Field(alias="roomId", min_length=1)
    role: str = Field(min_length=1)
    client_id: Optional[str] = Field(default=None, alias="clientId")

    @field_validator("client_id", mode="before")
    @classmethod
    def stringify_client_id(cls, value):
        # Opaque identifier; clients may send numbers
        if value is None:
            return None
        return str(value)


class OfferMessage(InboundMessage):
    sdp: Any


class AnswerMessage(InboundMessage):
    sdp: Any


class IceCandidateMessage(InboundMessage):
    candidate: Any


# Server -> client

class OutboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class RoomJoined(OutboundMessage):
    type: Literal["room-joined"] = "room-joined"
    room_id: str = Field(alias="roomId")
    role: str
    success: bool = True


class PeerJoined(OutboundMessage):
    type: Literal["peer-joined"] = "peer-joined"
    room_id: str = Field(alias="roomId")
    peer_role: str = Field(alias="peerRole")


class PeerDisconnected(OutboundMessage):
    type: Literal["peer-disconnected"] = "peer-disconnected"
    room_id: str = Field(alias="roomId")
    peer_role: str = Field(alias="peerRole")


class ForwardedOffer(OutboundMessage):
    type: Literal["offer"] = "offer"
    room_id: str = Field(alias="roomId")
    sdp: Any


class ForwardedAnswer(OutboundMessage):
    type: Literal["answer"] = "answer"
    room_id: str = Field(alias="roomId")
    sdp: Any


class ForwardedIceCandidate(OutboundMessage):
    type: Literal["ice-candidate"] = "ice-candidate"
    room_id: str = Field(alias="roomId")
    candidate: Any


class ErrorMessage(OutboundMessage):
    type: Literal["error"] = "error"
    message: str
    timestamp: str = Field(default_factory=utc_timestamp)
