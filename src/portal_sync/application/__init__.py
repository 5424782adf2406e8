"""Application services: synchronizers, polling and admin use cases."""

from portal_sync.application.admin_service import AdminService
from portal_sync.application.config_synchronizer import (
    ConfigSynchronizer,
    ConfigSynchronizerSettings,
)
from portal_sync.application.polling_orchestrator import (
    PollingOrchestrator,
    PollingSettings,
    PresentationState,
)
from portal_sync.application.public_status_fallback import (
    FallbackSettings,
    PublicStatusFallback,
)
from portal_sync.application.remote_control_binder import RemoteControlBinder
from portal_sync.application.session_synchronizer import (
    SessionSynchronizer,
    SessionSynchronizerSettings,
)
from portal_sync.application.status_snapshot import build_status_snapshot

__all__ = [
    "AdminService",
    "ConfigSynchronizer",
    "ConfigSynchronizerSettings",
    "FallbackSettings",
    "PollingOrchestrator",
    "PollingSettings",
    "PresentationState",
    "PublicStatusFallback",
    "RemoteControlBinder",
    "SessionSynchronizer",
    "SessionSynchronizerSettings",
    "build_status_snapshot",
]
