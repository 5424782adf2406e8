"""Throttled public status lookup used while the remote control endpoint is down."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portal_sync.domain.models.remote_server import PublicServerStatus
    from portal_sync.domain.ports import PublicStatusLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FallbackSettings:
    """Throttle and backoff for the public status API."""

    min_interval_seconds: float = 300.0
    backoff_seconds: float = 900.0
    failure_threshold: int = 3


class PublicStatusFallback:
    """Asks a public server-list API at most once per interval.

    After ``failure_threshold`` consecutive failures no lookup is made for
    ``backoff_seconds`` after the last attempt. A successful lookup resets the
    failure count.
    """

    def __init__(
        self,
        lookup: PublicStatusLookup,
        settings: FallbackSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lookup = lookup
        self.settings = settings or FallbackSettings()
        self._clock = clock
        self.address: str | None = None
        self._last_attempt: float | None = None
        self._failures = 0

    @property
    def failures(self) -> int:
        """Consecutive failed lookups."""
        return self._failures

    def ready(self) -> bool:
        """Whether a lookup may be made now."""
        if not self.address:
            return False
        if self._last_attempt is None:
            return True
        elapsed = self._clock() - self._last_attempt
        if self._failures >= self.settings.failure_threshold and elapsed < self.settings.backoff_seconds:
            return False
        return elapsed >= self.settings.min_interval_seconds

    async def poll(self) -> PublicServerStatus | None:
        """Look the server up if the throttle allows it.

        Returns:
            The public status, or None when the lookup was skipped.

        Raises:
            RemoteControlError: When the lookup was made and failed.
        """
        if not self.ready():
            return None
        address = self.address
        self._last_attempt = self._clock()
        try:
            status = await self._lookup.lookup(address)
        except Exception:
            self._failures += 1
            if self._failures == self.settings.failure_threshold:
                logger.warning(
                    f"Public status lookup failed {self._failures} times, "
                    f"backing off for {self.settings.backoff_seconds:g}s"
                )
            raise
        self._failures = 0
        return status
