"""Contract for building remote control adapters."""

from typing import Protocol

from portal_sync.domain.ports.remote_control import RemoteControl


class RemoteControlFactory(Protocol):
    """Builds an immutable remote control adapter for an endpoint and credential."""

    def __call__(self, base_url: str, api_key: str) -> RemoteControl:
        """Create the adapter."""
        ...
