from typing import Optional

from connections import Connection, ConnectionRegistry
from errors import ConflictError, ProtocolError, RoutingError
from registry import Room, RoomRegistry
from roles import Role
from schemas.messages import OutboundMessage, PeerDisconnected, PeerJoined, RoomJoined
from stats import ServerStats
from logging_config import get_logger

logger = get_logger(__name__)


class PresenceManager:
    """Join, pairing notification, relay and disconnect cleanup on top of the registries.

    All methods are synchronous: each call finishes mutating the room and
    connection maps before control returns to the event loop.
    """

    def __init__(self, registry: RoomRegistry, connections: ConnectionRegistry, stats: ServerStats):
        self.registry = registry
        self.connections = connections
        self.stats = stats

    def connect(self, remote_address: str = "unknown", user_agent: str = "unknown") -> Connection:
        connection = self.connections.register(Connection(remote_address, user_agent))
        self.stats.total_connections += 1
        logger.info(f"New {connection.device_type} connection from {remote_address}")
        logger.debug(f"User Agent: {user_agent[:100]}{'...' if len(user_agent) > 100 else ''}")
        return connection

    def join(self, connection: Connection, room_id: str, role: Role, role_label: str, client_id: Optional[str] = None) -> Room:
        if connection.is_joined:
            raise ConflictError(f"Already joined room {connection.room_id} as {connection.role_label}")

        logger.info(f"{role_label} attempting to join room {room_id}")
        room = self.registry.get_or_create(room_id)
        # An occupied slot means the room already existed, so a rejected join leaves nothing behind
        self.registry.assign_slot(room, role, connection)

        connection.role = role
        connection.role_label = role_label
        connection.room_id = room_id
        connection.client_id = client_id
        logger.info(f"{role.device.capitalize()} joined room {room_id} (client: {client_id})")

        connection.send(RoomJoined(room_id=room_id, role=role_label).to_wire())

        if self.registry.is_complete(room):
            self._announce_pair(room)
        else:
            waiting = "Windows receiver" if room.receiver is None else "Android sender"
            logger.info(f"Room {room_id} waiting for {waiting} to join...")
        return room

    def _announce_pair(self, room: Room):
        self.stats.successful_pairs += 1
        logger.info(f"Room {room.room_id} is complete! Both devices connected, ready for WebRTC")
        for role in (Role.RECEIVER, Role.SENDER):
            occupant = room.occupant(role)
            occupant.paired = True
            occupant.send(PeerJoined(room_id=room.room_id, peer_role=role.opposite.device).to_wire())
        logger.debug(f"Total successful room connections: {self.stats.successful_pairs}")

    def room_of(self, connection: Connection) -> Room:
        if not connection.is_joined:
            raise ProtocolError("Not in a room")
        room = self.registry.get(connection.room_id)
        if room is None:
            raise ProtocolError("Room not found")
        return room

    def relay(self, connection: Connection, message: OutboundMessage):
        """Deliver a message to the counterpart of ``connection``.

        Raises RoutingError if the opposite slot is empty.
        """
        room = self.room_of(connection)
        target_role = connection.role.opposite
        target = room.occupant(target_role)
        if target is None:
            raise RoutingError(f"No {target_role.device} peer in room {room.room_id} to forward {message.type} to")
        target.send(message.to_wire())
        logger.debug(f"Forwarded {message.type} in room {room.room_id} ({connection.role.device} -> {target_role.device})")

    def disconnect(self, connection: Connection):
        """Tear down a connection's state. Safe to call repeatedly and for connections that never joined."""
        if connection not in self.connections:
            logger.debug(f"Connection {connection.connection_id} already cleaned up")
            connection.close()
            return

        logger.info(f"{connection.describe()} disconnected after {connection.session_seconds}s (client: {connection.client_id})")
        if connection.is_joined:
            self._leave_room(connection)

        self.connections.discard(connection)
        connection.close()
        logger.debug(f"Active connections: {len(self.connections)}, Active rooms: {len(self.registry)}")

    def _leave_room(self, connection: Connection):
        room = self.registry.get(connection.room_id)
        if room is None:
            return
        if room.occupant(connection.role) is not connection:
            return

        self.registry.vacate_slot(room, connection.role, connection)
        logger.info(f"{connection.role.device.capitalize()} removed from room {room.room_id}")

        remaining = room.occupant(connection.role.opposite)
        if remaining is not None:
            remaining.paired = False
            logger.info(f"Notifying remaining peer about disconnection in room {room.room_id}")
            remaining.send(PeerDisconnected(room_id=room.room_id, peer_role=connection.role_label).to_wire())

        self.registry.delete_if_empty(room)

    def log_stats(self):
        logger.info(
            f"Server statistics: rooms={len(self.registry)}, connections={len(self.connections)}, "
            f"total_connections={self.stats.total_connections}, successful_pairs={self.stats.successful_pairs}, "
            f"errors={self.stats.errors}, uptime={self.stats.format_uptime()}"
        )

    def log_active_rooms(self):
        if len(self.registry) == 0:
            logger.info("No active rooms")
            return
        for room in self.registry.rooms():
            windows_status = "connected" if room.receiver else "waiting"
            android_status = "connected" if room.sender else "waiting"
            ready = " - ready for WebRTC connection" if self.registry.is_complete(room) else ""
            logger.info(
                f"Room {room.room_id} ({room.age_seconds}s old): "
                f"windows {windows_status}, android {android_status}{ready}"
            )
