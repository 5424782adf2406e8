"""Local persisted caches."""

from portal_sync.adapters.cache.json_file_config_cache import JsonFileConfigCache

__all__ = ["JsonFileConfigCache"]
