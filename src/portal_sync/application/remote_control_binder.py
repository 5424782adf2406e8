"""Reactive wiring between the synchronizers and the polling orchestrator."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portal_sync.application.config_synchronizer import ConfigSynchronizer
    from portal_sync.application.session_synchronizer import SessionSynchronizer
    from portal_sync.domain.contracts import PollingOrchestratorProtocol, RemoteControlFactory
    from portal_sync.domain.ports import RemoteControl

logger = logging.getLogger(__name__)

Binding = tuple[str, str]


class RemoteControlBinder:
    """Rebuilds the remote control adapter whenever endpoint or credential change.

    The adapter is never mutated: each change of (endpoint, credential) builds a
    new one and hands it to the orchestrator, which restarts polling.
    """

    def __init__(
        self,
        session_synchronizer: SessionSynchronizer,
        config_synchronizer: ConfigSynchronizer,
        orchestrator: PollingOrchestratorProtocol,
        adapter_factory: RemoteControlFactory,
    ) -> None:
        self._session_synchronizer = session_synchronizer
        self._config_synchronizer = config_synchronizer
        self._orchestrator = orchestrator
        self._adapter_factory = adapter_factory
        self._binding: Binding | None = None
        self._adapter: RemoteControl | None = None
        self._rebind_task: asyncio.Task | None = None

    @property
    def adapter(self) -> RemoteControl | None:
        """The adapter most recently handed to the orchestrator."""
        return self._adapter

    def attach(self) -> None:
        """Start listening to both synchronizers."""
        self._session_synchronizer.add_listener(self._on_state_change)
        self._config_synchronizer.add_listener(self._on_state_change)

    def desired_binding(self) -> Binding | None:
        """Endpoint and credential to bind, or None while the user may not poll."""
        identity = self._session_synchronizer.identity
        credential = self._session_synchronizer.credential
        base_url = self._config_synchronizer.base_url
        if identity is None or not identity.is_approved or not credential or not base_url:
            return None
        return (base_url, credential)

    async def refresh(self) -> None:
        """Apply the current desired binding and wait until it is in place."""
        self._on_state_change()
        if self._rebind_task is not None:
            await self._rebind_task

    async def close(self) -> None:
        """Detach, wait for pending rebinds and unbind the orchestrator."""
        self._session_synchronizer.remove_listener(self._on_state_change)
        self._config_synchronizer.remove_listener(self._on_state_change)
        if self._rebind_task is not None:
            await self._rebind_task
        self._binding = None
        self._adapter = None
        await self._orchestrator.set_adapter(None)

    def _on_state_change(self) -> None:
        config = self._config_synchronizer.config
        self._orchestrator.set_fallback_address(config.server_metadata.ip if config else None)

        binding = self.desired_binding()
        if binding == self._binding:
            return
        self._binding = binding
        previous = self._rebind_task
        self._rebind_task = asyncio.create_task(self._rebind(binding, previous))

    async def _rebind(self, binding: Binding | None, previous: asyncio.Task | None) -> None:
        if previous is not None and not previous.done():
            await previous
        if binding != self._binding:
            # A newer change superseded this one while waiting.
            return

        if binding is None:
            logger.info("Remote control unbound")
            adapter = None
        else:
            logger.info(f"Binding remote control to {binding[0]}")
            adapter = self._adapter_factory(*binding)
        self._adapter = adapter
        await self._orchestrator.set_adapter(adapter)
