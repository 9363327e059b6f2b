import pytest
from fastapi.testclient import TestClient

from app import create_app
from connections import ConnectionRegistry
from lifecycle import PresenceManager
from message_router import MessageRouter
from registry import RoomRegistry
from stats import ServerStats


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def presence(registry):
    return PresenceManager(registry, ConnectionRegistry(), ServerStats())


@pytest.fixture
def router(presence):
    return MessageRouter(presence)


@pytest.fixture
def drain():
    """Return a function that empties a connection's outbox and returns the queued messages."""
    def _drain(connection):
        messages = []
        while not connection.outbox.empty():
            message = connection.outbox.get_nowait()
            if message is not None:
                messages.append(message)
        return messages
    return _drain


@pytest.fixture
def signaling_app():
    return create_app(mode="dev", host="localhost", port=8080, stats_interval=3600, active_rooms_interval=3600)


@pytest.fixture
def client(signaling_app):
    # Entering the client shares one event loop between all sockets opened from it
    with TestClient(signaling_app) as client:
        yield client
