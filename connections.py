import asyncio
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from roles import Role
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ConnectionPhase(str, Enum):
    UNJOINED = "unjoined"
    JOINED = "joined"
    PAIRED = "paired"
    CLOSED = "closed"


def detect_device_type(user_agent: str) -> str:
    if "Android" in user_agent:
        return "Android Device"
    if "Windows" in user_agent:
        return "Windows Device"
    if "Electron" in user_agent:
        return "Electron App"
    if "Chrome" in user_agent:
        return "Chrome Browser"
    if "Firefox" in user_agent:
        return "Firefox Browser"
    if "Safari" in user_agent:
        return "Safari Browser"
    return "Unknown Device"


class Connection:
    """One live signaling socket.

    Outbound messages are queued on ``outbox`` and written to the socket by the
    transport's writer task, so ``send`` never blocks the caller.
    """

    def __init__(self, remote_address: str = "unknown", user_agent: str = "unknown"):
        self.connection_id = str(uuid.uuid4())
        self.remote_address = remote_address
        self.user_agent = user_agent
        self.device_type = detect_device_type(user_agent)
        self.connected_at = datetime.now(timezone.utc)
        self.state = ConnectionState.OPEN
        self.role: Optional[Role] = None
        self.role_label: Optional[str] = None
        self.room_id: Optional[str] = None
        self.client_id: Optional[str] = None
        self.paired = False
        self.outbox: asyncio.Queue = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def session_seconds(self) -> int:
        return int((datetime.now(timezone.utc) - self.connected_at).total_seconds())

    @property
    def is_joined(self) -> bool:
        return self.room_id is not None and self.role is not None

    @property
    def phase(self) -> ConnectionPhase:
        if not self.is_open:
            return ConnectionPhase.CLOSED
        if not self.is_joined:
            return ConnectionPhase.UNJOINED
        if self.paired:
            return ConnectionPhase.PAIRED
        return ConnectionPhase.JOINED

    def describe(self) -> str:
        if self.is_joined:
            return f"{self.role_label} ({self.room_id})"
        return f"unjoined connection {self.connection_id[:8]}"

    def send(self, message: dict) -> bool:
        """Queue a message for delivery. Messages to a closed connection are discarded."""
        if not self.is_open:
            logger.debug(f"Discarding {message.get('type', 'unknown')} for closed connection {self.connection_id}")
            return False
        self.outbox.put_nowait(message)
        return True

    def close(self):
        if not self.is_open:
            return
        self.state = ConnectionState.CLOSED
        self.paired = False
        # Wakes the writer task so it can exit
        self.outbox.put_nowait(None)


class ConnectionRegistry:
    """Live connections keyed by connection id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, connection: Connection) -> Connection:
        self._connections[connection.connection_id] = connection
        logger.debug(f"Registered connection {connection.connection_id} (active: {len(self._connections)})")
        return connection

    def discard(self, connection: Connection) -> bool:
        removed = self._connections.pop(connection.connection_id, None) is not None
        if removed:
            logger.debug(f"Discarded connection {connection.connection_id} (active: {len(self._connections)})")
        return removed

    def __contains__(self, connection: Connection) -> bool:
        return connection.connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
