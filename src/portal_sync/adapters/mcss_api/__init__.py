"""MCSS remote control adapter."""

from portal_sync.adapters.mcss_api.mcss_client import McssRemoteControl, McssRemoteControlFactory

__all__ = ["McssRemoteControl", "McssRemoteControlFactory"]
