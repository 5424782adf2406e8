"""Ports (interfaces) for the ports-and-adapters architecture."""

from portal_sync.domain.ports.config_cache import ConfigCache
from portal_sync.domain.ports.database_backend import DatabaseBackend, Row
from portal_sync.domain.ports.identity_provider import IdentityProvider, SessionListener
from portal_sync.domain.ports.public_status import PublicStatusLookup
from portal_sync.domain.ports.remote_control import RemoteControl

__all__ = [
    "ConfigCache",
    "DatabaseBackend",
    "IdentityProvider",
    "PublicStatusLookup",
    "RemoteControl",
    "Row",
    "SessionListener",
]
