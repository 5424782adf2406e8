"""Global configuration synchronization with cache-then-revalidate hydration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from portal_sync.application.error_reporting import extract_error_details
from portal_sync.domain.config_merge import (
    MASTER_KEY_PATHS,
    assemble_configuration,
    merge_config_patch,
    set_master_key,
)
from portal_sync.domain.errors import FatalLoadFailure
from portal_sync.domain.models.global_configuration import GlobalConfiguration
from portal_sync.domain.models.load_status import LoadStatus

if TYPE_CHECKING:
    from portal_sync.domain.contracts.state_listener import StateListener
    from portal_sync.domain.ports import ConfigCache, DatabaseBackend

logger = logging.getLogger(__name__)

CONFIG_CACHE_KEY = "global_config"
GLOBAL_CONFIG_ROW_ID = 1


@dataclass(frozen=True)
class ConfigSynchronizerSettings:
    """Settings for the configuration synchronizer."""

    safety_timeout_seconds: float = 6.0
    # Used only when no admin-configured endpoint exists.
    default_base_url: str | None = None


class ConfigSynchronizer:
    """Owns the global configuration and its auxiliary collections."""

    def __init__(
        self,
        database: DatabaseBackend,
        cache: ConfigCache,
        settings: ConfigSynchronizerSettings | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            database: Backend holding global_config, notifications and roadmap_items.
            cache: Local persisted cache for the assembled configuration.
            settings: Timing and fallback settings.
        """
        self._database = database
        self._cache = cache
        self.settings = settings or ConfigSynchronizerSettings()

        self._config: GlobalConfiguration | None = None
        self._status = LoadStatus.IDLE
        self._error: str | None = None
        self._alive = False
        self._has_finished_initial_load = False
        self._refresh_generation = 0
        self._safety_task: asyncio.Task | None = None
        self._listeners: list[StateListener] = []

    @property
    def config(self) -> GlobalConfiguration | None:
        """Best-known configuration (cached or live)."""
        return self._config

    @property
    def status(self) -> LoadStatus:
        """Current load status."""
        return self._status

    @property
    def loading(self) -> bool:
        """Whether hydration is still running."""
        return not self._status.is_settled

    @property
    def error(self) -> str | None:
        """Message of the last fatal load failure, if any."""
        return self._error

    @property
    def base_url(self) -> str | None:
        """Remote-control endpoint: admin-configured value, else the environment default."""
        if self._config is not None and self._config.mcss.default_base_url:
            return self._config.mcss.default_base_url
        return self.settings.default_base_url

    @property
    def is_dashboard_enabled(self) -> bool:
        """Whether the remote dashboard is switched on globally."""
        return self._config.is_dashboard_enabled if self._config is not None else False

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        """Unregister a callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def initialize(self) -> None:
        """Hydrate from the local cache, then revalidate against the backend."""
        self._alive = True
        self._safety_task = asyncio.create_task(self._run_safety_timer())

        cached = self._load_cached()
        if cached is not None:
            self._config = cached
            self._set_status(LoadStatus.CACHE)
            logger.info("Applied cached configuration while the live fetch runs")

        await self.refresh()

    async def refresh(self) -> None:
        """Fetch the live configuration and collections in parallel.

        When refreshes overlap, only the most recently started one is applied.
        """
        self._refresh_generation += 1
        generation = self._refresh_generation
        self._set_status(LoadStatus.FETCHING)
        row_result, notes_result, roadmap_result, keys_result = await asyncio.gather(
            self._database.select_one("global_config", "*", {"id": GLOBAL_CONFIG_ROW_ID}),
            self._database.select("notifications", order_by="created_at", ascending=False),
            self._database.select("roadmap_items", order_by="created_at", ascending=True),
            self._fetch_master_keys(),
            return_exceptions=True,
        )
        if not self._alive:
            return
        if generation != self._refresh_generation:
            logger.debug("Discarding configuration fetch superseded by a newer refresh")
            return

        if isinstance(row_result, BaseException) or row_result is None:
            failure = FatalLoadFailure(
                f"Global configuration unavailable: {row_result or 'row missing'}"
            )
            if isinstance(row_result, BaseException):
                details = extract_error_details(row_result)
                logger.error(f"{failure} ({details.reason})")
            else:
                logger.error(str(failure))
            self._error = str(failure)
            self._finish_loading(LoadStatus.ERROR)
            return

        previous = self._config
        config = assemble_configuration(
            row_result,
            self._rows_or_empty("notifications", notes_result),
            self._rows_or_empty("roadmap_items", roadmap_result),
            None if isinstance(keys_result, BaseException) else keys_result,
        )
        if previous is not None:
            config = self._retain_failed_parts(
                config, previous, notes_result, roadmap_result, keys_result
            )

        self._config = config
        self._error = None
        self._store_cached(config)
        self._finish_loading(LoadStatus.READY)

    def close(self) -> None:
        """Cancel the safety timer; later results are dropped."""
        self._alive = False
        if self._safety_task is not None and not self._safety_task.done():
            self._safety_task.cancel()
        logger.info("Config synchronizer closed")

    async def update_global_config(self, patch: Mapping[str, Any]) -> None:
        """Write `patch` to the backend, then merge it into local state.

        Keys present in the patch overwrite local fields even when falsy.
        """
        await self._database.update("global_config", dict(patch), {"id": GLOBAL_CONFIG_ROW_ID})
        if not self._alive:
            return
        self._config = merge_config_patch(self._config or GlobalConfiguration(), patch)
        self._store_cached(self._config)
        self._notify()

    async def update_dashboard_status(self, enabled: bool) -> None:
        """Switch the remote dashboard on or off globally."""
        await self.update_global_config({"is_dashboard_enabled": enabled})

    async def update_mcss_master_key(self, tier: str, key: str | None) -> None:
        """Store a master credential for `tier` and mirror it locally."""
        if tier not in MASTER_KEY_PATHS:
            raise ValueError(f"Unknown credential tier: {tier!r}")
        await self._database.upsert("mcss_configs", {"id": tier, "mcss_api_key": key})
        if not self._alive:
            return
        self._config = set_master_key(self._config or GlobalConfiguration(), tier, key)
        self._store_cached(self._config)
        self._notify()

    def remove_notification(self, notification_id: str) -> None:
        """Drop a deleted notification from local state."""
        if self._config is None:
            return
        remaining = [n for n in self._config.notifications if n.id != notification_id]
        self._config = self._config.model_copy(update={"notifications": remaining})
        self._store_cached(self._config)
        self._notify()

    # Internals

    async def _fetch_master_keys(self) -> dict[str, str | None]:
        keys: dict[str, str | None] = {}
        for tier in MASTER_KEY_PATHS:
            row = await self._database.select_one("mcss_configs", "id, mcss_api_key", {"id": tier})
            keys[tier] = row.get("mcss_api_key") if row else None
        return keys

    @staticmethod
    def _rows_or_empty(name: str, result: Any) -> list[dict[str, Any]]:
        if isinstance(result, BaseException):
            details = extract_error_details(result)
            logger.warning(f"Fetching {name} failed: {details.reason} ({result})")
            return []
        return list(result or [])

    @staticmethod
    def _retain_failed_parts(
        config: GlobalConfiguration,
        previous: GlobalConfiguration,
        notes_result: Any,
        roadmap_result: Any,
        keys_result: Any,
    ) -> GlobalConfiguration:
        updates: dict[str, Any] = {}
        if isinstance(notes_result, BaseException):
            updates["notifications"] = previous.notifications
        if isinstance(roadmap_result, BaseException):
            updates["roadmap_items"] = previous.roadmap_items
        if isinstance(keys_result, BaseException):
            logger.warning(f"Fetching master keys failed: {keys_result}")
            updates["mcss"] = config.mcss.model_copy(
                update={
                    "master_standard_key": previous.mcss.master_standard_key,
                    "master_admin_key": previous.mcss.master_admin_key,
                }
            )
        return config.model_copy(update=updates) if updates else config

    def _load_cached(self) -> GlobalConfiguration | None:
        try:
            payload = self._cache.load(CONFIG_CACHE_KEY)
            return GlobalConfiguration.from_cache(payload) if payload else None
        except Exception as e:
            logger.warning(f"Ignoring unreadable cached configuration: {e}")
            return None

    def _store_cached(self, config: GlobalConfiguration) -> None:
        try:
            self._cache.store(CONFIG_CACHE_KEY, config.to_cache())
        except OSError as e:
            logger.warning(f"Could not persist configuration cache: {e}")

    async def _run_safety_timer(self) -> None:
        await asyncio.sleep(self.settings.safety_timeout_seconds)
        if not self._has_finished_initial_load:
            logger.warning(
                f"Configuration hydration exceeded {self.settings.safety_timeout_seconds}s, "
                "finalizing as TIMEOUT"
            )
            self._finish_loading(LoadStatus.TIMEOUT)

    def _set_status(self, status: LoadStatus) -> None:
        if not self._alive:
            return
        self._status = status
        self._notify()

    def _finish_loading(self, status: LoadStatus) -> None:
        if not self._alive:
            return
        self._status = status
        if not self._has_finished_initial_load:
            self._has_finished_initial_load = True
            logger.info(f"Initial configuration load finished via {status}")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Config state listener failed")
