"""Configuration adapters."""

from portal_sync.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
