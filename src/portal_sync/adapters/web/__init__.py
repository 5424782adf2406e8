"""Web adapters: remote-control relay, status route and rate limiting."""

from portal_sync.adapters.web.proxy_relay import ProxyRelay
from portal_sync.adapters.web.rate_limit_middleware import RateLimitMiddleware
from portal_sync.adapters.web.web_app import WebServer, create_web_app

__all__ = ["ProxyRelay", "RateLimitMiddleware", "WebServer", "create_web_app"]
