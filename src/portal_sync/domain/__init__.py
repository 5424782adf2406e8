"""Domain layer - models, ports and pure synchronization rules."""

from portal_sync.domain.models import (
    GlobalConfiguration,
    Identity,
    LoadStatus,
    RemoteServerHandle,
    RemoteServerStats,
)
from portal_sync.domain.ports import (
    ConfigCache,
    DatabaseBackend,
    IdentityProvider,
    RemoteControl,
)

__all__ = [
    "ConfigCache",
    "DatabaseBackend",
    "GlobalConfiguration",
    "Identity",
    "IdentityProvider",
    "LoadStatus",
    "RemoteControl",
    "RemoteServerHandle",
    "RemoteServerStats",
]
