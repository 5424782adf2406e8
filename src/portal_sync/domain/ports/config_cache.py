"""Local persisted cache port."""

from typing import Any, Protocol


class ConfigCache(Protocol):
    """Port for the small key/value store that survives restarts."""

    def load(self, key: str) -> dict[str, Any] | None:
        """Return the stored payload for `key`, or None."""
        ...

    def store(self, key: str, value: dict[str, Any]) -> None:
        """Persist `value` under `key`."""
        ...
