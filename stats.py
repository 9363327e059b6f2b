from datetime import datetime, timezone


class ServerStats:
    """Running counters reported by /health, /stats and the periodic status log."""

    def __init__(self):
        self.total_connections = 0
        self.successful_pairs = 0
        self.errors = 0
        self.started_at = datetime.now(timezone.utc)

    @property
    def uptime_seconds(self) -> int:
        return int((datetime.now(timezone.utc) - self.started_at).total_seconds())

    def format_uptime(self) -> str:
        uptime = self.uptime_seconds
        hours, remainder = divmod(uptime, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours}h {minutes}m {seconds}s"

    def snapshot(self, active_rooms: int, active_connections: int) -> dict:
        return {
            "total_connections": self.total_connections,
            "active_connections": active_connections,
            "active_rooms": active_rooms,
            "successful_pairs": self.successful_pairs,
            "errors": self.errors,
            "started_at": self.started_at.isoformat(),
            "uptime": self.uptime_seconds,
        }
