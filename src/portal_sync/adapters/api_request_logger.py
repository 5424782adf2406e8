"""Utility for logging outgoing requests when PORTAL_SYNC_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "apikey", "mcss-api-key", "x-api-key"})
SENSITIVE_FIELDS = frozenset({"password", "refresh_token", "mcss_api_key"})
REDACTED = "***REDACTED***"


def should_log_requests() -> bool:
    """Check if request logging is enabled via PORTAL_SYNC_LOG_REQUESTS."""
    return os.getenv("PORTAL_SYNC_LOG_REQUESTS", "").lower() == "true"


def _build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with query parameters."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Replace credential-bearing header values."""
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def _redact_payload(payload: Any) -> Any:
    if isinstance(payload, dict):
        return {
            k: REDACTED if k in SENSITIVE_FIELDS else _redact_payload(v) for k, v in payload.items()
        }
    if isinstance(payload, list):
        return [_redact_payload(item) for item in payload]
    return payload


def _format_payload(payload: Any) -> str:
    """Format payload for logging."""
    try:
        return json.dumps(_redact_payload(payload), indent=2)
    except (TypeError, ValueError):
        return str(payload)


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: Any = None,
) -> None:
    """Log request details if PORTAL_SYNC_LOG_REQUESTS is enabled.

    Credential headers and password-like payload fields are redacted.
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {_build_url_with_params(url, params)}"]
    if headers:
        log_parts.append(f"Headers: {json.dumps(redact_headers(headers), indent=2)}")
    if payload is not None:
        log_parts.append(f"Payload: {_format_payload(payload)}")

    logger.info("API Request:\n" + "\n".join(log_parts))
