"""Starlette application serving the relay, health and status routes."""

import logging
from collections.abc import Callable
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from portal_sync.adapters.web.proxy_relay import RELAY_METHODS, ProxyRelay
from portal_sync.adapters.web.rate_limit_middleware import RateLimitMiddleware

logger = logging.getLogger(__name__)

StatusProvider = Callable[[], dict[str, Any]]


def create_web_app(
    relay: ProxyRelay,
    status_provider: StatusProvider | None = None,
    requests_per_minute: int = 100,
) -> RateLimitMiddleware:
    """Build the ASGI app wrapped in the per-IP rate limiter."""

    async def healthz(_request: Request) -> Response:
        """Health check endpoint for load balancers and monitoring."""
        return Response(content="Ok", media_type="text/plain")

    async def status(_request: Request) -> Response:
        if status_provider is None:
            return JSONResponse({"error": "Status not available"}, status_code=503)
        return JSONResponse(status_provider())

    app = Starlette(
        routes=[
            Route("/mcss-proxy", relay.handle, methods=RELAY_METHODS),
            Route("/healthz", healthz, methods=["GET"]),
            Route("/status", status, methods=["GET"]),
        ]
    )
    return RateLimitMiddleware(app, requests_per_minute=requests_per_minute)


class WebServer:
    """Runs the web app under uvicorn until stopped."""

    def __init__(self, app: Any, host: str, port: int) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._server: Any | None = None

    async def start(self) -> None:
        """Serve until ``stop()`` is called."""
        import uvicorn

        config = uvicorn.Config(self._app, host=self._host, port=self._port, log_level="info")
        self._server = uvicorn.Server(config)
        logger.info(f"Serving relay and status on http://{self._host}:{self._port}")
        await self._server.serve()

    async def stop(self) -> None:
        """Ask uvicorn to shut down."""
        if self._server:
            self._server.should_exit = True
