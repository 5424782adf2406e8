"""Remote server domain models."""

from dataclasses import dataclass
from enum import IntEnum


class ServerStatus(IntEnum):
    """Status codes reported by the remote control endpoint."""

    UNKNOWN = -1
    OFFLINE = 0
    ONLINE = 1
    RESTARTING = 2
    STARTING = 3
    STOPPING = 4

    @classmethod
    def from_code(cls, code: object) -> "ServerStatus":
        """Map a raw status code to a status, falling back to UNKNOWN."""
        if isinstance(code, bool) or not isinstance(code, int):
            return cls.UNKNOWN
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class ServerAction(IntEnum):
    """Lifecycle actions accepted by the remote control endpoint."""

    STOP = 1
    START = 2
    KILL = 3
    RESTART = 4


ACTION_CODES: dict[str, int] = {
    "Stop": ServerAction.STOP.value,
    "Start": ServerAction.START.value,
    "Kill": ServerAction.KILL.value,
    "Restart": ServerAction.RESTART.value,
}


def resolve_action(action: str | int) -> int:
    """Translate a symbolic action name to its numeric code.

    Raw integer codes pass through unchanged. Numeric strings are accepted too,
    since command palettes tend to send them as text.
    """
    if isinstance(action, bool):
        raise ValueError(f"Unknown server action: {action!r}")
    if isinstance(action, int):
        return action
    if action in ACTION_CODES:
        return ACTION_CODES[action]
    if action.isdigit():
        return int(action)
    raise ValueError(f"Unknown server action: {action!r}")


@dataclass(frozen=True)
class RemoteServerHandle:
    """A server known to the remote control endpoint."""

    server_id: str
    status: ServerStatus
    name: str = ""
    description: str = ""
    type: str = ""


@dataclass(frozen=True)
class RemoteServerStats:
    """Telemetry derived from whatever shape the endpoint currently returns."""

    cpu_usage: float = 0
    ram_usage: float = 0
    online_players: int = 0
    max_players: int = 0
    uptime: str = "00:00:00"


@dataclass(frozen=True)
class PublicServerStatus:
    """What a public server-list API can tell without the remote control endpoint."""

    online: bool
    online_players: int = 0
    max_players: int = 20
