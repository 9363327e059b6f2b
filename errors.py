from roles import Role


class SignalingError(Exception):
    """Base error for the signaling core. ``message`` is safe to show to clients."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProtocolError(SignalingError):
    """Malformed payload, unknown message type, missing fields or a message not allowed in this state."""


class ConflictError(SignalingError):
    """Join rejected: the connection already joined, or the role is taken."""


class SlotOccupied(ConflictError):
    def __init__(self, room_id: str, role: Role):
        self.room_id = room_id
        self.role = role
        if role is Role.SENDER:
            message = "Room already has an Android sender"
        else:
            message = "Room already has a Windows receiver"
        super().__init__(message)


class RoutingError(SignalingError):
    """The intended recipient of a relayed message is not in the room."""


class TransportError(SignalingError):
    """The socket failed while receiving."""
