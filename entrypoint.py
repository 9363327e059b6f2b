import argparse
import uvicorn
import os
from logging_config import setup_logging


def parse_args():
    parser = argparse.ArgumentParser(description="MirrorCast signaling server")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--dev", action="store_true", help="listen on localhost only")
    group.add_argument("--local", action="store_true", help="listen on all interfaces for local WiFi pairing")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    # constants.py reads MODE at import, so it must be set before the app is loaded
    if args.dev:
        os.environ["MODE"] = "dev"
    elif args.local:
        os.environ["MODE"] = "local"
    dev_mode = os.getenv("MODE", "production").lower() == "dev"

    # Setup logging before importing app
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if dev_mode else "INFO")
    os.environ["LOG_LEVEL"] = log_level
    log_file = os.getenv("LOG_FILE", None)
    setup_logging(log_level=log_level, log_file=log_file)

    from constants import HOST, PORT, MODE
    from logging_config import get_logger

    logger = get_logger(__name__)
    logger.info(f"Starting MirrorCast signaling server on {HOST}:{PORT} ({MODE} mode)")
    # Room state is per process, so never more than one worker
    uvicorn.run("app:app", host=HOST, port=PORT, reload=dev_mode, workers=1)
