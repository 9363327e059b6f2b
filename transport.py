import asyncio
import json

from fastapi import APIRouter
from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from connections import Connection
from errors import TransportError
from lifecycle import PresenceManager
from logging_config import get_logger

logger = get_logger(__name__)

signaling_router = APIRouter(tags=["signaling"])


async def write_outbox(connection: Connection, websocket: WebSocket, presence: PresenceManager):
    """Drain a connection's queued messages to its socket, in order, until it is closed.

    A failed send frees the connection's slot at once rather than waiting for
    the receive loop to notice the dead socket.
    """
    while True:
        message = await connection.outbox.get()
        if message is None:
            break
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            presence.stats.errors += 1
            logger.warning(f"Error sending {message.get('type', 'unknown')} to {connection.describe()}: {e}")
            presence.disconnect(connection)
            break


async def receive_text(websocket: WebSocket) -> str:
    try:
        message = await websocket.receive()
    except Exception as e:
        raise TransportError(str(e)) from e
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    if message.get("text") is not None:
        return message["text"]
    data = message.get("bytes") or b""
    return data.decode("utf-8", errors="replace")


@signaling_router.websocket("/")
@signaling_router.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket):
    """Signaling socket: one receive loop per client, every message handled to completion in turn."""
    presence = websocket.app.state.presence
    message_router = websocket.app.state.message_router

    await websocket.accept()
    remote_address = websocket.client.host if websocket.client else "unknown"
    user_agent = websocket.headers.get("user-agent", "unknown")
    connection = presence.connect(remote_address, user_agent)
    writer = asyncio.create_task(write_outbox(connection, websocket, presence))

    try:
        while connection.is_open:
            raw = await receive_text(websocket)
            message_router.dispatch(connection, raw)
    except WebSocketDisconnect as e:
        logger.debug(f"{connection.describe()} closed the socket - Code: {e.code}, Reason: {e.reason or 'No reason'}")
    except TransportError as e:
        presence.stats.errors += 1
        logger.error(f"WebSocket error for {connection.describe()}: {e.message}")
    except Exception as e:
        presence.stats.errors += 1
        logger.error(f"Error handling messages from {connection.describe()}: {e}", exc_info=True)
    finally:
        presence.disconnect(connection)
        writer.cancel()
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
