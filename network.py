import socket
from typing import List

import psutil

from logging_config import get_logger

logger = get_logger(__name__)


def get_local_ips() -> List[str]:
    """Non-loopback IPv4 addresses of this host, used to build reachable URLs for the QR code."""
    ips = []
    try:
        interfaces = psutil.net_if_addrs()
    except Exception as e:
        logger.error(f"Could not enumerate network interfaces: {e}", exc_info=True)
        return ips
    for addresses in interfaces.values():
        for addr in addresses:
            if addr.family == socket.AF_INET and not addr.address.startswith("127."):
                ips.append(addr.address)
    return ips


def advertised_host(mode: str, bind_host: str) -> str:
    if mode == "dev" or bind_host == "localhost":
        return "localhost"
    ips = get_local_ips()
    return ips[0] if ips else "localhost"


def websocket_url(mode: str, bind_host: str, port: int) -> str:
    return f"ws://{advertised_host(mode, bind_host)}:{port}"
