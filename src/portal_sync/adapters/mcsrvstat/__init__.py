"""Public server status lookup via mcsrvstat.us."""

from portal_sync.adapters.mcsrvstat.status_client import McsrvstatLookup

__all__ = ["McsrvstatLookup"]
