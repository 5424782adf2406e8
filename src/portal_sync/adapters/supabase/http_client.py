"""HTTP client shared by the Supabase adapters."""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import aiohttp

from portal_sync.adapters.api_request_logger import log_api_request
from portal_sync.domain.errors import BackendError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession


class SupabaseHttpClient:
    """Thin JSON client for a Supabase project.

    Holds the project URL, the public API key and the access token of the
    signed-in user. The identity adapter updates ``access_token`` on sign-in
    and sign-out so database calls run as that user.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: "ClientSession",
        timeout_seconds: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token: str | None = None
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def url(self, path: str) -> str:
        """Absolute URL for a project-relative path."""
        return f"{self.base_url}{path}"

    @staticmethod
    async def _decode(response: "ClientResponse") -> Any:
        text = (await response.read()).decode("utf-8", errors="replace")
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    @staticmethod
    def _error_message(body: Any, status: int) -> str:
        if isinstance(body, dict):
            for key in ("msg", "message", "error_description", "error"):
                if body.get(key):
                    return str(body[key])
        if isinstance(body, str) and body:
            return body[:200]
        return f"HTTP {status}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, Any]:
        """Send a request and return (status, decoded body).

        Raises:
            BackendError: On transport failures and on HTTP status >= 400.
        """
        url = self.url(path)
        request_headers = self._headers(headers)
        log_api_request(method, url, dict(params) if params else None, request_headers, json)

        try:
            async with self._session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=request_headers,
                timeout=self._timeout,
            ) as response:
                body = await self._decode(response)
                status = response.status
        except (aiohttp.ClientError, TimeoutError, asyncio.TimeoutError) as e:
            logger.warning(f"Supabase request {method} {path} failed: {e}")
            raise BackendError(f"Request to {path} failed: {e}") from e

        if status >= 400:
            message = self._error_message(body, status)
            logger.debug(f"Supabase returned {status} for {method} {path}: {message}")
            raise BackendError(f"{message} ({status})", status_code=status)
        return status, body
