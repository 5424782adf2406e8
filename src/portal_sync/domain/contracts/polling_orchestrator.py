"""Protocol for remote server polling."""

from typing import Protocol

from portal_sync.domain.ports.remote_control import RemoteControl


class PollingOrchestratorProtocol(Protocol):
    """Protocol for polling the remote server and dispatching actions."""

    async def start(self) -> None:
        """Start the polling loop."""
        ...

    async def stop(self) -> None:
        """Stop the polling loop."""
        ...

    async def set_adapter(self, adapter: RemoteControl | None) -> None:
        """Replace the adapter, restarting polling against the new one."""
        ...

    def set_fallback_address(self, address: str | None) -> None:
        """Set the server address used by the public status fallback."""
        ...

    async def perform_action(self, action: str) -> bool:
        """Dispatch a lifecycle action unless one is already in flight."""
        ...
