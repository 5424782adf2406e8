"""Per-IP rate limiting for the relay and status routes, using throttled-py."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from throttled import RateLimiterType, Throttled, rate_limiter, store

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_PATHS = frozenset({"/healthz"})
DEFAULT_RETRY_AFTER_SECONDS = 60.0


def extract_client_ip(request: Request) -> str:
    """Client IP of a request, honoring the first X-Forwarded-For entry."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    if request.client and request.client.host:
        return request.client.host

    logger.warning("Could not determine client IP, using 'unknown'")
    return "unknown"


def retry_after_seconds(result: Any) -> float:
    """Seconds until the limited client may retry, read from a throttled-py result."""
    state = getattr(result, "state", None)
    value = getattr(state, "retry_after", None) if state is not None else None
    if value is None:
        value = getattr(result, "retry_after", None)
    try:
        return float(value) if value is not None else DEFAULT_RETRY_AFTER_SECONDS
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket per client IP; health checks are never limited."""

    def __init__(
        self,
        app: Callable,
        requests_per_minute: int = 100,
        exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS,
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.exempt_paths = frozenset(exempt_paths)
        self.quota = rate_limiter.per_min(requests_per_minute, burst=requests_per_minute)
        self.rate_limiter_store = store.MemoryStore()
        logger.info(f"Rate limiting enabled: {requests_per_minute} requests per minute per IP")

    def _throttle_for(self, client_ip: str) -> Throttled:
        return Throttled(
            key=client_ip,
            using=RateLimiterType.TOKEN_BUCKET.value,
            quota=self.quota,
            store=self.rate_limiter_store,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Reject the request with 429 once the client's bucket is empty."""
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        client_ip = extract_client_ip(request)
        result = self._throttle_for(client_ip).limit()
        if result.limited:
            retry_after = retry_after_seconds(result)
            logger.warning(f"Rate limit exceeded for IP {client_ip}, retry after {retry_after}s")
            return JSONResponse(
                {"error": "Rate limit exceeded. Please try again later."},
                status_code=429,
                headers={"Retry-After": str(int(retry_after))},
            )

        response: Response = await call_next(request)
        return response
