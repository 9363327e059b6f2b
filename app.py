from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from routers.rooms import rooms_router
from transport import signaling_router
from connections import ConnectionRegistry
from registry import RoomRegistry
from lifecycle import PresenceManager
from message_router import MessageRouter
from stats import ServerStats
from network import get_local_ips, websocket_url
from constants import MODE, HOST, PORT, LOG_LEVEL, LOG_FILE, STATS_INTERVAL, ACTIVE_ROOMS_INTERVAL
import asyncio
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def report_periodically(interval: int, report, name: str):
    """Background task that calls ``report`` every ``interval`` seconds until cancelled."""
    logger.debug(f"Starting {name} reporter (every {interval}s)")
    try:
        while True:
            await asyncio.sleep(interval)
            try:
                report()
            except Exception as e:
                logger.error(f"Error in {name} reporter: {e}", exc_info=True)
    except asyncio.CancelledError:
        logger.debug(f"{name} reporter cancelled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    presence: PresenceManager = app.state.presence
    settings = app.state.settings

    logger.info("=" * 60)
    logger.info("MirrorCast Signaling Server")
    logger.info(f"Mode: {settings['mode'].upper()}")
    logger.info(f"Host: {settings['host']}, Port: {settings['port']}")
    logger.info(f"Local network IPs: {', '.join(get_local_ips()) or 'none'}")
    logger.info(f"WebSocket URL: {websocket_url(settings['mode'], settings['host'], settings['port'])}")
    logger.info("=" * 60)

    def report_stats():
        if len(presence.connections) > 0 or len(presence.registry) > 0:
            presence.log_stats()

    def report_rooms():
        if len(presence.connections) > 0:
            presence.log_active_rooms()

    tasks = [
        asyncio.create_task(report_periodically(settings["stats_interval"], report_stats, "statistics")),
        asyncio.create_task(report_periodically(settings["active_rooms_interval"], report_rooms, "active rooms")),
    ]
    logger.info("MirrorCast signaling server is ready for connections!")
    try:
        yield
    finally:
        logger.info("Shutting down signaling server...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        presence.log_stats()


def create_app(
    mode: str = MODE,
    host: str = HOST,
    port: int = PORT,
    stats_interval: int = STATS_INTERVAL,
    active_rooms_interval: int = ACTIVE_ROOMS_INTERVAL,
) -> FastAPI:
    """Build the application together with the state it owns.

    Rooms and connections live on ``app.state`` and are only touched from the
    event loop, so the server must run as a single worker process.
    """
    app = FastAPI(title="MirrorCast Signaling Server", lifespan=lifespan)

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allow all origins
        allow_credentials=True,
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers
    )

    app.state.settings = {
        "mode": mode,
        "host": host,
        "port": port,
        "stats_interval": stats_interval,
        "active_rooms_interval": active_rooms_interval,
    }
    app.state.registry = RoomRegistry()
    app.state.connections = ConnectionRegistry()
    app.state.stats = ServerStats()
    app.state.presence = PresenceManager(app.state.registry, app.state.connections, app.state.stats)
    app.state.message_router = MessageRouter(app.state.presence)

    app.include_router(rooms_router)
    app.include_router(signaling_router)

    logger.info(f"FastAPI application initialized (mode: {mode})")
    return app


app = create_app()
