"""Load status state machine values."""

from enum import StrEnum


class LoadStatus(StrEnum):
    """Hydration status of a synchronizer.

    SessionSynchronizer advances IDLE -> SESSION -> SYNCING -> READY,
    ConfigSynchronizer advances IDLE -> CACHE -> FETCHING -> READY.
    TIMEOUT and ERROR can be reached from any in-progress state.
    """

    IDLE = "IDLE"
    SESSION = "SESSION"
    SYNCING = "SYNCING"
    CACHE = "CACHE"
    FETCHING = "FETCHING"
    READY = "READY"
    TIMEOUT = "TIMEOUT"
    ERROR = "ERROR"

    @property
    def is_settled(self) -> bool:
        """Whether consumers may stop showing a loading indicator."""
        return self in (LoadStatus.READY, LoadStatus.TIMEOUT, LoadStatus.ERROR)
