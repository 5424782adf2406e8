"""Remote control endpoint port."""

from typing import Protocol

from portal_sync.domain.models.remote_server import RemoteServerHandle, RemoteServerStats


class RemoteControl(Protocol):
    """Port for the game-server process manager.

    Every method returns decoded data or raises RemoteControlError.
    """

    async def list_servers(self) -> list[RemoteServerHandle]:
        """List the servers managed by the endpoint."""
        ...

    async def get_console(self, server_id: str, line_count: int = 50) -> list[str]:
        """Return recent console lines, most recent last."""
        ...

    async def execute_command(self, server_id: str, command: str) -> None:
        """Send a console command."""
        ...

    async def get_server_stats(self, server_id: str) -> RemoteServerStats:
        """Return normalized telemetry for a server."""
        ...

    async def execute_action(self, server_id: str, action: str | int) -> None:
        """Dispatch a lifecycle action (Start, Stop, Kill, Restart or a raw code)."""
        ...
