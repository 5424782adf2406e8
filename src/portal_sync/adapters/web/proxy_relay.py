"""Relay that forwards remote-control calls to a home server.

Browsers cannot reach self-signed home servers directly, so clients send the
real target in the ``mcss-target-url`` header and this route forwards it.
"""

import asyncio
import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import aiohttp
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from portal_sync.adapters.mcss_api.constants import (
    API_KEY_HEADER,
    TARGET_URL_HEADER,
    UPSTREAM_API_KEY_HEADER,
)

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": f"Content-Type, {TARGET_URL_HEADER}, {API_KEY_HEADER}",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}
RELAY_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CONNECTION_ERROR_CONTEXT = (
    "Failed to connect to MCSS server. Is it online and its API port forwarded?"
)


def validate_target_url(target_url: str) -> None:
    """Raise ValueError unless target_url is an absolute http(s) URL."""
    parts = urlsplit(target_url)
    if parts.scheme not in ("http", "https"):
        raise ValueError(f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError("missing host")


class ProxyRelay:
    """Starlette endpoint forwarding one request to the target in its headers."""

    def __init__(self, session: "ClientSession", timeout_seconds: float = 8.0) -> None:
        self._session = session
        self._timeout_seconds = timeout_seconds

    def _error(self, status_code: int, payload: dict[str, str]) -> JSONResponse:
        return JSONResponse(payload, status_code=status_code, headers=CORS_HEADERS)

    async def handle(self, request: Request) -> Response:
        """Forward the request and return the upstream status and body verbatim."""
        if request.method == "OPTIONS":
            return Response("OK", status_code=200, headers=CORS_HEADERS)

        target_url = request.headers.get(TARGET_URL_HEADER)
        api_key = request.headers.get(API_KEY_HEADER, "")
        if not target_url:
            return self._error(400, {"error": f"Missing {TARGET_URL_HEADER} header"})
        try:
            validate_target_url(target_url)
        except ValueError as e:
            return self._error(400, {"error": f"Invalid Target URL: {e}"})

        logger.info(f"[PROXY] Forwarding {request.method} to: {target_url}")
        body = await request.body()
        headers = {
            UPSTREAM_API_KEY_HEADER: api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            async with self._session.request(
                request.method,
                target_url,
                headers=headers,
                data=body or None,
                ssl=False,
                timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
            ) as upstream:
                status = upstream.status
                content = await upstream.read()
        except (TimeoutError, asyncio.TimeoutError):
            logger.warning(f"[PROXY] Timeout after {self._timeout_seconds}s: {target_url}")
            return self._error(
                504, {"error": f"Connection Timeout ({self._timeout_seconds:g}s)"}
            )
        except aiohttp.InvalidURL as e:
            return self._error(400, {"error": f"Invalid Target URL: {e}"})
        except aiohttp.ClientError as e:
            logger.error(f"[PROXY ERROR] {e}")
            return self._error(500, {"error": str(e), "context": CONNECTION_ERROR_CONTEXT})

        return Response(
            content,
            status_code=status,
            headers=CORS_HEADERS,
            media_type="application/json",
        )
