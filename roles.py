from enum import Enum
from typing import Optional


class Role(str, Enum):
    """The two slots of a room. Clients may name them by device instead."""

    SENDER = "sender"
    RECEIVER = "receiver"

    @property
    def opposite(self) -> "Role":
        return Role.RECEIVER if self is Role.SENDER else Role.SENDER

    @property
    def device(self) -> str:
        return "android" if self is Role.SENDER else "windows"

    @classmethod
    def resolve(cls, raw) -> Optional["Role"]:
        """Map a client-supplied role or device alias to a Role, or None if unknown."""
        if not isinstance(raw, str):
            return None
        return ROLE_ALIASES.get(raw.strip().lower())


ROLE_ALIASES = {
    "sender": Role.SENDER,
    "android": Role.SENDER,
    "receiver": Role.RECEIVER,
    "windows": Role.RECEIVER,
}
