"""Polling orchestrator for the remote game server."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from portal_sync.application.error_reporting import extract_error_details
from portal_sync.domain.contracts.polling_orchestrator import PollingOrchestratorProtocol
from portal_sync.domain.errors import RemoteControlError
from portal_sync.domain.models.polling_session import (
    DEFAULT_LOG_CAPACITY,
    LIMITED_ONLINE_STATUS_TEXT,
    UNREACHABLE_STATUS_TEXT,
    LogEntry,
    PollingSession,
)
from portal_sync.domain.models.remote_server import RemoteServerStats, ServerStatus

if TYPE_CHECKING:
    from portal_sync.application.public_status_fallback import PublicStatusFallback
    from portal_sync.domain.ports import RemoteControl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollingSettings:
    """Timing settings for the polling orchestrator."""

    short_interval_seconds: float = 5.0
    long_interval_seconds: float = 300.0
    settle_delay_seconds: float = 1.5
    startup_grace_seconds: float = 2.2
    log_capacity: int = DEFAULT_LOG_CAPACITY


class PresentationState(StrEnum):
    """What a dashboard should show for the current server."""

    DISCONNECTED = "DISCONNECTED"
    ESTABLISHING_UPLINK = "ESTABLISHING_UPLINK"
    UNREACHABLE = "UNREACHABLE"
    ONLINE_LIMITED = "ONLINE_LIMITED"
    OFFLINE = "OFFLINE"
    ONLINE = "ONLINE"
    RESTARTING = "RESTARTING"
    STARTING = "STARTING"
    STOPPING = "STOPPING"
    UNKNOWN = "UNKNOWN"


class PollingOrchestrator(PollingOrchestratorProtocol):
    """Keeps a PollingSession fresh and gates lifecycle actions.

    Probes run every ``short_interval_seconds`` while the endpoint answers and
    back off to ``long_interval_seconds`` once a probe fails. Probe failures are
    folded into the session's reachability flag and never raised. While the
    endpoint is unreachable an optional public status fallback supplies a
    limited online/offline view.
    """

    def __init__(
        self,
        settings: PollingSettings | None = None,
        adapter: RemoteControl | None = None,
        fallback: PublicStatusFallback | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Timing settings; defaults are used when omitted.
            adapter: Initial remote control adapter, if already known.
            fallback: Public status lookup consulted after failed probes.
        """
        self.settings = settings or PollingSettings()
        self._adapter = adapter
        self._fallback = fallback
        self._session = PollingSession(log_capacity=self.settings.log_capacity)
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._grace_task: asyncio.Task | None = None
        self._grace_open = False

    @property
    def adapter(self) -> RemoteControl | None:
        """The adapter currently polled."""
        return self._adapter

    @property
    def session(self) -> PollingSession:
        """The live polling session."""
        return self._session

    @property
    def running(self) -> bool:
        """Whether the polling loop is active."""
        return self._task is not None and not self._task.done()

    def next_interval(self) -> float:
        """Delay before the next scheduled probe, based on the last probe outcome."""
        if self._session.reachable:
            return self.settings.short_interval_seconds
        return self.settings.long_interval_seconds

    def presentation_state(self) -> PresentationState:
        """Status to present, preferring 'establishing uplink' during the startup grace window."""
        if self._adapter is None:
            return PresentationState.DISCONNECTED
        if not self._session.reachable:
            if self._grace_open:
                return PresentationState.ESTABLISHING_UPLINK
            public = self._session.public_status
            if public is not None:
                return PresentationState.ONLINE_LIMITED if public.online else PresentationState.OFFLINE
            return PresentationState.UNREACHABLE
        return PresentationState(self._session.status.name)

    async def start(self) -> None:
        """Start polling the current adapter."""
        if self.running:
            logger.warning("Polling orchestrator already running")
            return
        if self._adapter is None:
            logger.info("No remote control adapter bound, polling not started")
            return

        self._grace_open = True
        self._grace_task = asyncio.create_task(self._close_grace_window())
        self._task = asyncio.create_task(self._poll_loop(self._generation))
        logger.info("Started remote server polling")

    async def stop(self) -> None:
        """Stop polling and cancel the grace timer."""
        if self._grace_task is not None and not self._grace_task.done():
            self._grace_task.cancel()
        self._grace_open = False

        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Polling loop cancelled")
            logger.info("Stopped remote server polling")
        self._task = None

    def set_fallback_address(self, address: str | None) -> None:
        """Server address handed to the public status fallback."""
        if self._fallback is not None:
            self._fallback.address = address or None

    async def set_adapter(self, adapter: RemoteControl | None) -> None:
        """Replace the adapter wholesale and restart polling against it."""
        await self.stop()
        self._generation += 1
        self._adapter = adapter
        self._session = PollingSession(log_capacity=self.settings.log_capacity)
        if adapter is not None:
            await self.start()

    async def probe(self) -> bool:
        """Refresh stats and status once. Returns True when the endpoint answered."""
        adapter = self._adapter
        if adapter is None:
            return False
        generation = self._generation
        session = self._session

        started = time.monotonic()
        try:
            server_id = await self._resolve_server_id(adapter, session)
            stats, servers = await asyncio.gather(
                adapter.get_server_stats(server_id), adapter.list_servers()
            )
        except Exception as e:
            if generation != self._generation:
                return False
            details = extract_error_details(e)
            logger.warning(f"Remote server probe failed: {details.reason} ({e})")
            session.reachable = False
            session.latency_ms = None
            session.last_probe = datetime.now(UTC)
            await self._consult_fallback(session)
            self._apply_public_status(session)
            session.probe_count += 1
            return False

        if generation != self._generation:
            logger.debug("Discarding probe result from a replaced adapter")
            return False

        handle = next((s for s in servers if s.server_id == server_id), None)
        status = handle.status if handle is not None else ServerStatus.OFFLINE

        session.stats = stats
        session.reachable = True
        session.public_status = None
        session.status = status
        session.status_text = status.name
        session.latency_ms = int((time.monotonic() - started) * 1000)
        session.last_probe = datetime.now(UTC)
        session.probe_count += 1
        logger.debug(f"Probe ok: {status.name}, cpu {stats.cpu_usage}%, ram {stats.ram_usage}%")
        return True

    async def perform_action(self, action: str) -> bool:
        """Dispatch a lifecycle action unless one is already in flight.

        Returns:
            True if the action was dispatched, False if it was rejected.
        """
        session = self._session
        if session.action_in_flight is not None:
            logger.info(f"Action {action} ignored, {session.action_in_flight} still in flight")
            return False
        adapter = self._adapter
        server_id = session.server_id
        if adapter is None or server_id is None:
            logger.info(f"Action {action} ignored, no server bound")
            return False

        session.action_in_flight = action
        generation = self._generation
        self._append_log(session, "ACTION", f"Dispatching {action}")
        try:
            try:
                await adapter.execute_action(server_id, action)
            except Exception as e:
                logger.warning(f"Action {action} failed: {e}")
                self._append_log(session, "ERROR", f"{action} failed: {e}")
            else:
                self._append_log(session, "OK", f"{action} acknowledged")

            await asyncio.sleep(self.settings.settle_delay_seconds)
            if generation == self._generation:
                await self.probe()
        finally:
            session.action_in_flight = None
        return True

    async def send_command(self, command: str) -> bool:
        """Send a console command and log it without waiting for its output."""
        session = self._session
        adapter = self._adapter
        if adapter is None or session.server_id is None or not command.strip():
            return False
        try:
            await adapter.execute_command(session.server_id, command)
        except Exception as e:
            logger.warning(f"Command failed: {e}")
            self._append_log(session, "ERROR", f"{command}: {e}")
            return False
        self._append_log(session, "EXEC", f"[EXEC]: {command}")
        return True

    async def fetch_console(self, line_count: int = 50) -> list[str]:
        """Return recent console lines; adapter errors reach the caller."""
        adapter = self._adapter
        server_id = self._session.server_id
        if adapter is None or server_id is None:
            return []
        return await adapter.get_console(server_id, line_count)

    async def _resolve_server_id(self, adapter: RemoteControl, session: PollingSession) -> str:
        if session.server_id is not None:
            return session.server_id
        servers = await adapter.list_servers()
        if not servers:
            raise RemoteControlError("Remote endpoint reports no servers")
        session.server_id = servers[0].server_id
        logger.info(f"Tracking remote server {session.server_id} ({servers[0].name})")
        return session.server_id

    async def _consult_fallback(self, session: PollingSession) -> None:
        if self._fallback is None:
            return
        try:
            public = await self._fallback.poll()
        except Exception as e:
            logger.info(f"Public status fallback unavailable: {e}")
            session.public_status = None
            return
        if public is not None:
            session.public_status = public

    @staticmethod
    def _apply_public_status(session: PollingSession) -> None:
        public = session.public_status
        if public is None:
            session.status_text = UNREACHABLE_STATUS_TEXT
            return
        session.status = ServerStatus.ONLINE if public.online else ServerStatus.OFFLINE
        session.status_text = LIMITED_ONLINE_STATUS_TEXT if public.online else "OFFLINE"
        session.stats = RemoteServerStats(
            online_players=public.online_players, max_players=public.max_players, uptime="N/A"
        )

    @staticmethod
    def _append_log(session: PollingSession, tag: str, message: str) -> None:
        session.log.append(LogEntry(timestamp=datetime.now(UTC), tag=tag, message=message))

    async def _close_grace_window(self) -> None:
        await asyncio.sleep(self.settings.startup_grace_seconds)
        self._grace_open = False

    async def _poll_loop(self, generation: int) -> None:
        """Main polling loop; the interval is recomputed after every probe."""
        try:
            while generation == self._generation:
                await self.probe()
                await asyncio.sleep(self.next_interval())
        except asyncio.CancelledError:
            logger.info("Polling loop cancelled")
            raise
