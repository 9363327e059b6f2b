import json
from typing import Callable, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from connections import Connection
from errors import ConflictError, ProtocolError, RoutingError
from lifecycle import PresenceManager
from roles import Role
from schemas.messages import (
    AnswerMessage,
    ErrorMessage,
    ForwardedAnswer,
    ForwardedIceCandidate,
    ForwardedOffer,
    IceCandidateMessage,
    JoinRoomMessage,
    OfferMessage,
)
from logging_config import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

INVALID_ROLE_MESSAGE = 'Invalid role. Use "receiver"/"windows" or "sender"/"android"'


def parse_payload(model: Type[M], payload: dict, error_message: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Validation failed for {model.__name__}: {e.errors()}")
        raise ProtocolError(error_message) from e


class MessageRouter:
    """Parses inbound envelopes and dispatches them to the presence manager.

    ProtocolError and ConflictError are answered with an error envelope on the
    offending connection; RoutingError is logged and dropped.
    """

    def __init__(self, presence: PresenceManager):
        self.presence = presence
        self.handlers: Dict[str, Callable[[Connection, dict], None]] = {
            "join-room": self.handle_join_room,
            "offer": self.handle_offer,
            "answer": self.handle_answer,
            "ice-candidate": self.handle_ice_candidate,
        }

    def dispatch(self, connection: Connection, raw: str):
        if not connection.is_open:
            logger.debug(f"Ignoring message from closed connection {connection.connection_id}")
            return
        try:
            payload = self.decode(raw)
            message_type = payload.get("type")
            logger.debug(
                f"Received: {message_type} from {connection.describe()} "
                f"(roomId={payload.get('roomId')}, role={payload.get('role')}, clientId={payload.get('clientId')})"
            )
            handler = self.handlers.get(message_type) if isinstance(message_type, str) else None
            if handler is None:
                raise ProtocolError(f"Unknown message type: {message_type}")
            handler(connection, payload)
        except (ProtocolError, ConflictError) as e:
            self.presence.stats.errors += 1
            logger.warning(f"Rejected message from {connection.describe()}: {e.message}")
            self.send_error(connection, e.message)
        except RoutingError as e:
            # The sender is deliberately not told; it relies on its own timeout
            logger.warning(e.message)

    @staticmethod
    def decode(raw: str) -> dict:
        try:
            payload = json.loads(raw)
        except (ValueError, TypeError, RecursionError) as e:
            # ValueError covers JSONDecodeError; RecursionError is raised for deeply nested input
            logger.error(f"Invalid JSON message: {e}")
            raise ProtocolError("Invalid message format") from e
        if not isinstance(payload, dict):
            raise ProtocolError("Invalid message format")
        return payload

    @staticmethod
    def send_error(connection: Connection, message: str):
        connection.send(ErrorMessage(message=message).to_wire())

    def handle_join_room(self, connection: Connection, payload: dict):
        message = parse_payload(JoinRoomMessage, payload, "Missing roomId or role")
        role = Role.resolve(message.role)
        if role is None:
            raise ProtocolError(INVALID_ROLE_MESSAGE)
        self.presence.join(
            connection,
            room_id=message.room_id,
            role=role,
            role_label=message.role.strip().lower(),
            client_id=message.client_id,
        )

    def handle_offer(self, connection: Connection, payload: dict):
        self._require_role(connection, Role.SENDER, "Only senders can create offers")
        message = parse_payload(OfferMessage, payload, "Missing sdp")
        self.presence.relay(connection, ForwardedOffer(room_id=connection.room_id, sdp=message.sdp))

    def handle_answer(self, connection: Connection, payload: dict):
        self._require_role(connection, Role.RECEIVER, "Only receivers can create answers")
        message = parse_payload(AnswerMessage, payload, "Missing sdp")
        self.presence.relay(connection, ForwardedAnswer(room_id=connection.room_id, sdp=message.sdp))

    def handle_ice_candidate(self, connection: Connection, payload: dict):
        self.presence.room_of(connection)
        message = parse_payload(IceCandidateMessage, payload, "Missing candidate")
        self.presence.relay(connection, ForwardedIceCandidate(room_id=connection.room_id, candidate=message.candidate))

    def _require_role(self, connection: Connection, role: Role, error_message: str):
        self.presence.room_of(connection)
        if connection.role is not role:
            raise ProtocolError(error_message)
