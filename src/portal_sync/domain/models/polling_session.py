"""Polling session state for the remote server dashboard."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from portal_sync.domain.models.remote_server import (
    PublicServerStatus,
    RemoteServerStats,
    ServerStatus,
)

DEFAULT_LOG_CAPACITY = 5
UNREACHABLE_STATUS_TEXT = "UNREACHABLE"
LIMITED_ONLINE_STATUS_TEXT = "ONLINE (LTD)"


@dataclass(frozen=True)
class LogEntry:
    """One line of the rolling activity log."""

    timestamp: datetime
    tag: str
    message: str


@dataclass
class PollingSession:
    """Ephemeral view of the current server, rebuilt whenever the adapter changes."""

    log_capacity: int = DEFAULT_LOG_CAPACITY
    server_id: str | None = None
    stats: RemoteServerStats | None = None
    reachable: bool = False
    status: ServerStatus = ServerStatus.UNKNOWN
    status_text: str = "OFFLINE"
    latency_ms: int | None = None
    action_in_flight: str | None = None
    last_probe: datetime | None = None
    probe_count: int = 0
    # Limited status from the public lookup while the endpoint is unreachable.
    public_status: PublicServerStatus | None = None
    log: deque[LogEntry] = field(init=False)

    def __post_init__(self) -> None:
        self.log = deque(maxlen=self.log_capacity)

    @property
    def online(self) -> bool:
        """True when the endpoint answered and reports the server as running."""
        return self.reachable and self.status == ServerStatus.ONLINE
