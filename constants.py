import os

MODES = ("dev", "local", "production")

MODE = os.getenv("MODE", "production").lower()
if MODE not in MODES:
    MODE = "production"

HOST = os.getenv("HOST", "localhost" if MODE == "dev" else "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# Seconds between periodic status reports
STATS_INTERVAL = int(os.getenv("STATS_INTERVAL", 120 if MODE == "dev" else 300))
ACTIVE_ROOMS_INTERVAL = int(os.getenv("ACTIVE_ROOMS_INTERVAL", 30))

ROOM_ID_LENGTH = 8
