"""Domain models for the portal synchronization layer."""

from portal_sync.domain.models.auth_session import AuthEvent, AuthSession, AuthUser
from portal_sync.domain.models.error_details import ErrorDetails
from portal_sync.domain.models.global_configuration import (
    CountdownConfig,
    GlobalConfiguration,
    McssSettings,
    Notification,
    RoadmapItem,
    ServerMetadata,
    SiteInfo,
    Socials,
)
from portal_sync.domain.models.identity import Identity
from portal_sync.domain.models.intel_asset import IntelAsset
from portal_sync.domain.models.load_status import LoadStatus
from portal_sync.domain.models.polling_session import LogEntry, PollingSession
from portal_sync.domain.models.remote_server import (
    PublicServerStatus,
    RemoteServerHandle,
    RemoteServerStats,
    ServerAction,
    ServerStatus,
)
from portal_sync.domain.models.unlock_result import UnlockResult

__all__ = [
    "AuthEvent",
    "AuthSession",
    "AuthUser",
    "CountdownConfig",
    "ErrorDetails",
    "GlobalConfiguration",
    "Identity",
    "IntelAsset",
    "LoadStatus",
    "LogEntry",
    "McssSettings",
    "Notification",
    "PollingSession",
    "PublicServerStatus",
    "RemoteServerHandle",
    "RemoteServerStats",
    "RoadmapItem",
    "ServerAction",
    "ServerMetadata",
    "ServerStatus",
    "SiteInfo",
    "Socials",
    "UnlockResult",
]
