"""MCSS remote control client, direct or through the relay."""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from portal_sync.adapters.api_request_logger import log_api_request
from portal_sync.adapters.mcss_api.constants import (
    API_KEY_HEADER,
    DEFAULT_CONSOLE_LINES,
    SERVERS_PATH,
    TARGET_URL_HEADER,
    UPSTREAM_API_KEY_HEADER,
    server_path,
)
from portal_sync.domain.errors import RemoteControlError
from portal_sync.domain.models.remote_server import (
    RemoteServerHandle,
    RemoteServerStats,
    ServerStatus,
    resolve_action,
)
from portal_sync.domain.ports.remote_control import RemoteControl
from portal_sync.domain.stats_normalizer import normalize_stats

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession


def _parse_server(item: dict[str, Any]) -> RemoteServerHandle | None:
    server_id = item.get("serverId") or item.get("id")
    if not server_id:
        return None
    return RemoteServerHandle(
        server_id=str(server_id),
        status=ServerStatus.from_code(item.get("status")),
        name=item.get("name") or "",
        description=item.get("description") or "",
        type=str(item.get("type") or ""),
    )


class McssRemoteControl(RemoteControl):
    """Remote control endpoint bound to one base URL and API key.

    Instances are immutable; a new endpoint or key means a new instance.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: "ClientSession",
        proxy_url: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._session = session
        self._proxy_url = proxy_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        mode = f"via {proxy_url}" if proxy_url else "direct"
        logger.info(f"MCSS client initialized ({mode}). Target: {self._base_url}")

    @property
    def base_url(self) -> str:
        """Remote endpoint base URL without trailing slash."""
        return self._base_url

    def _request_target(self, target_url: str) -> tuple[str, dict[str, str], bool]:
        """URL to call, headers to send and whether to verify TLS."""
        if self._proxy_url:
            headers = {
                TARGET_URL_HEADER: target_url,
                API_KEY_HEADER: self._api_key,
                "Content-Type": "application/json",
            }
            return self._proxy_url, headers, True
        headers = {
            UPSTREAM_API_KEY_HEADER: self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        # Home servers commonly run self-signed certificates.
        return target_url, headers, False

    @staticmethod
    async def _read_error(response: "ClientResponse") -> str:
        try:
            data = json.loads((await response.read()).decode("utf-8", errors="replace"))
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"Proxy Error: {response.status}"

    async def _fetch(self, path: str, method: str = "GET", payload: Any = None) -> Any:
        target_url = f"{self._base_url}{path}"
        url, headers, verify_ssl = self._request_target(target_url)
        log_api_request(method, target_url, headers=headers, payload=payload)

        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                json=payload,
                ssl=None if verify_ssl else False,
                timeout=self._timeout,
            ) as response:
                if response.status >= 300:
                    message = await self._read_error(response)
                    raise RemoteControlError(message, status_code=response.status)
                text = (await response.read()).decode("utf-8", errors="replace")
        except (aiohttp.ClientError, TimeoutError, asyncio.TimeoutError) as e:
            logger.error(f"MCSS fetch failed for {target_url}: {e}")
            raise RemoteControlError(f"Connection to {target_url} failed: {e}") from e

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def list_servers(self) -> list[RemoteServerHandle]:
        data = await self._fetch(SERVERS_PATH)
        if not isinstance(data, list):
            return []
        handles = [_parse_server(item) for item in data if isinstance(item, dict)]
        return [handle for handle in handles if handle is not None]

    async def get_console(self, server_id: str, line_count: int = DEFAULT_CONSOLE_LINES) -> list[str]:
        data = await self._fetch(server_path(server_id, f"/console?amountOfLines={line_count}"))
        if not isinstance(data, list):
            return []
        return [str(line) for line in data]

    async def execute_command(self, server_id: str, command: str) -> None:
        await self._fetch(
            server_path(server_id, "/execute/command"), method="POST", payload={"command": command}
        )

    async def get_server_stats(self, server_id: str) -> RemoteServerStats:
        data = await self._fetch(server_path(server_id, "/stats"))
        return normalize_stats(data)

    async def execute_action(self, server_id: str, action: str | int) -> None:
        action_id = resolve_action(action)
        await self._fetch(
            server_path(server_id, "/execute/action"), method="POST", payload={"action": action_id}
        )


class McssRemoteControlFactory:
    """Builds McssRemoteControl instances sharing one HTTP session."""

    def __init__(
        self,
        session: "ClientSession",
        proxy_url: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._session = session
        self._proxy_url = proxy_url
        self._timeout_seconds = timeout_seconds

    def __call__(self, base_url: str, api_key: str) -> McssRemoteControl:
        return McssRemoteControl(
            base_url,
            api_key,
            self._session,
            proxy_url=self._proxy_url,
            timeout_seconds=self._timeout_seconds,
        )
