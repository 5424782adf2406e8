"""Error taxonomy shared by adapters and synchronizers."""


class PortalSyncError(Exception):
    """Base class for all errors raised by portal_sync."""


class RemoteControlError(PortalSyncError):
    """The remote control endpoint (or the proxy in front of it) failed the call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StatsNormalizationError(RemoteControlError):
    """A stats payload had a shape that cannot be normalized."""


class AuthFailure(PortalSyncError):
    """Bad credentials or expired session. Never retried automatically."""


class BackendError(PortalSyncError):
    """The managed database backend rejected a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SyncFailure(PortalSyncError):
    """A profile or auxiliary fetch failed after the session was confirmed."""


class FatalLoadFailure(PortalSyncError):
    """The global configuration row itself could not be fetched."""
