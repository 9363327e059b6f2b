from datetime import datetime, timezone
from typing import Dict, List, Optional

from connections import Connection
from errors import SlotOccupied
from roles import Role
from logging_config import get_logger

logger = get_logger(__name__)


class Room:
    """A rendezvous point holding at most one sender and one receiver."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.created_at = datetime.now(timezone.utc)
        self.slots: Dict[Role, Connection] = {}

    def occupant(self, role: Role) -> Optional[Connection]:
        return self.slots.get(role)

    @property
    def sender(self) -> Optional[Connection]:
        return self.slots.get(Role.SENDER)

    @property
    def receiver(self) -> Optional[Connection]:
        return self.slots.get(Role.RECEIVER)

    @property
    def is_empty(self) -> bool:
        return not self.slots

    @property
    def age_seconds(self) -> int:
        return int((datetime.now(timezone.utc) - self.created_at).total_seconds())


class RoomRegistry:
    """Authoritative map of room id to Room.

    Not thread-safe: every call is expected to come from the single event loop
    that owns the server state.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id)
            self._rooms[room_id] = room
            logger.info(f"Created new room: {room_id}")
        return room

    def assign_slot(self, room: Room, role: Role, connection: Connection):
        if room.occupant(role) is not None:
            logger.warning(f"Room {room.room_id} already has a {role.value}")
            raise SlotOccupied(room.room_id, role)
        room.slots[role] = connection
        logger.debug(f"Assigned {role.value} slot in room {room.room_id} to connection {connection.connection_id}")

    def vacate_slot(self, room: Room, role: Role, connection: Optional[Connection] = None) -> bool:
        """Clear a slot and return whether the room is now empty.

        When ``connection`` is given the slot is only cleared if that connection holds it.
        """
        occupant = room.occupant(role)
        if occupant is not None and (connection is None or occupant is connection):
            del room.slots[role]
            logger.debug(f"Vacated {role.value} slot in room {room.room_id}")
        return room.is_empty

    def delete_if_empty(self, room: Room) -> bool:
        if not room.is_empty:
            return False
        if self._rooms.get(room.room_id) is room:
            del self._rooms[room.room_id]
            logger.info(f"Cleaning up empty room {room.room_id}")
        return True

    def is_complete(self, room: Room) -> bool:
        return room.sender is not None and room.receiver is not None

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
