"""Client for the public mcsrvstat.us status API."""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from portal_sync.adapters.api_request_logger import log_api_request
from portal_sync.domain.errors import RemoteControlError
from portal_sync.domain.models.remote_server import PublicServerStatus
from portal_sync.domain.ports.public_status import PublicStatusLookup

if TYPE_CHECKING:
    from aiohttp import ClientSession

logger = logging.getLogger(__name__)

DEFAULT_STATUS_API_URL = "https://api.mcsrvstat.us/2"
DEFAULT_MAX_PLAYERS = 20


def _as_count(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return int(value) or default


def parse_public_status(data: Any) -> PublicServerStatus:
    """Map an mcsrvstat.us reply to a PublicServerStatus."""
    if not isinstance(data, dict):
        raise RemoteControlError("Status API returned an unexpected payload")
    players = data.get("players") if isinstance(data.get("players"), dict) else {}
    return PublicServerStatus(
        online=bool(data.get("online")),
        online_players=_as_count(players.get("online"), 0),
        max_players=_as_count(players.get("max"), DEFAULT_MAX_PLAYERS),
    )


class McsrvstatLookup(PublicStatusLookup):
    """Looks a server address up on mcsrvstat.us."""

    def __init__(
        self,
        session: "ClientSession",
        base_url: str = DEFAULT_STATUS_API_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def lookup(self, address: str) -> PublicServerStatus:
        url = f"{self._base_url}/{address}"
        log_api_request("GET", url)
        try:
            async with self._session.request("GET", url, timeout=self._timeout) as response:
                content_type = response.headers.get("Content-Type", "")
                if response.status >= 300 or "application/json" not in content_type:
                    raise RemoteControlError(
                        f"Status API error: {response.status}", status_code=response.status
                    )
                text = (await response.read()).decode("utf-8", errors="replace")
        except (aiohttp.ClientError, TimeoutError, asyncio.TimeoutError) as e:
            logger.warning(f"Public status lookup for {address} failed: {e}")
            raise RemoteControlError(f"Status lookup for {address} failed: {e}") from e

        try:
            data = json.loads(text)
        except ValueError as e:
            raise RemoteControlError("Status API returned invalid JSON") from e
        return parse_public_status(data)
