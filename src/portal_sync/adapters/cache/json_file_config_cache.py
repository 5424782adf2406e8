"""JSON file implementation of the ConfigCache port."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from portal_sync.domain.ports.config_cache import ConfigCache

logger = logging.getLogger(__name__)


class JsonFileConfigCache(ConfigCache):
    """Key/value cache stored as one JSON object in a file.

    Writes go to a temporary file in the same directory and are renamed into
    place, so a crash never leaves a truncated cache behind.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the cache.

        Args:
            path: Cache file location; ``~`` is expanded.
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        """Location of the cache file."""
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache file {self._path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, key: str) -> dict[str, Any] | None:
        value = self._read_all().get(key)
        return value if isinstance(value, dict) else None

    def store(self, key: str, value: dict[str, Any]) -> None:
        data = self._read_all()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Stored {key} in {self._path}")
