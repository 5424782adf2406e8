"""Contracts shared between the application layer and its consumers."""

from portal_sync.domain.contracts.polling_orchestrator import PollingOrchestratorProtocol
from portal_sync.domain.contracts.remote_control_factory import RemoteControlFactory
from portal_sync.domain.contracts.state_listener import StateListener

__all__ = ["PollingOrchestratorProtocol", "RemoteControlFactory", "StateListener"]
