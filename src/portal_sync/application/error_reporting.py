"""Helpers for turning exceptions into short, loggable summaries."""

import re

from portal_sync.domain.errors import BackendError, RemoteControlError
from portal_sync.domain.models.error_details import ErrorDetails

_REASONS = {
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    429: "Rate limit exceeded",
    500: "Upstream error",
    502: "Bad gateway (server error)",
    503: "Service unavailable",
    504: "Gateway timeout",
}


def extract_error_details(error: BaseException) -> ErrorDetails:
    """Extract HTTP status code and error reason from an exception."""
    status_code: int | None = None
    if isinstance(error, RemoteControlError | BackendError):
        status_code = error.status_code
    if status_code is None:
        # Format: "Proxy Error: 502" or "... (502) ..."
        status_match = re.search(r"(?:\(|Error: )(\d{3})\b", str(error))
        status_code = int(status_match.group(1)) if status_match else None

    if status_code in _REASONS:
        reason = _REASONS[status_code]
    elif status_code is not None:
        reason = f"HTTP {status_code}"
    elif isinstance(error, RemoteControlError):
        reason = "Unreachable"
    elif isinstance(error, TimeoutError):
        reason = "Timed out"
    else:
        reason = "Unknown error"

    return ErrorDetails(status_code=status_code, reason=reason, message=str(error))
