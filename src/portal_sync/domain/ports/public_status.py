"""Public server status port."""

from typing import Protocol

from portal_sync.domain.models.remote_server import PublicServerStatus


class PublicStatusLookup(Protocol):
    """Port for a public server-list API queried by server address."""

    async def lookup(self, address: str) -> PublicServerStatus:
        """Return the publicly visible status of the server at `address`.

        Raises:
            RemoteControlError: When the lookup fails or returns an unusable reply.
        """
        ...
