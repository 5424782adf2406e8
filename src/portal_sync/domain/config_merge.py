"""Field-present merge of backend patches into the global configuration.

Backend rows and admin patches use snake_case column names; the configuration
model nests several of them. ``FIELD_PATHS`` is the single mapping between the two.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from portal_sync.domain.models.global_configuration import (
    GlobalConfiguration,
    Notification,
    RoadmapItem,
)

logger = logging.getLogger(__name__)

FIELD_PATHS: dict[str, tuple[str, ...]] = {
    "site_title": ("site_info", "title"),
    "site_description": ("site_info", "description"),
    "is_emergency_enabled": ("is_emergency_enabled",),
    "is_terminal_enabled": ("is_terminal_enabled",),
    "is_intel_enabled": ("is_intel_enabled",),
    "is_dashboard_enabled": ("is_dashboard_enabled",),
    "countdown_enabled": ("countdown", "enabled"),
    "countdown_date": ("countdown", "date"),
    "countdown_title": ("countdown", "title"),
    "server_ip": ("server_metadata", "ip"),
    "modpack_version": ("server_metadata", "modpack_version"),
    "discord_url": ("socials", "discord"),
    "mcss_enabled": ("mcss", "enabled"),
    "mcss_base_url": ("mcss", "default_base_url"),
}

MASTER_KEY_PATHS: dict[str, tuple[str, ...]] = {
    "standard": ("mcss", "master_standard_key"),
    "admin": ("mcss", "master_admin_key"),
}


ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate_rows(model: type[ModelT], rows: Iterable[Mapping[str, Any]]) -> list[ModelT]:
    """Validate collection rows, skipping null columns and rows that do not fit the model."""
    items: list[ModelT] = []
    for row in rows:
        present = {column: value for column, value in row.items() if value is not None}
        try:
            items.append(model.model_validate(present))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} row {row.get('id')!r}: {e}")
    return items


def _set_path(model: ModelT, path: tuple[str, ...], value: Any) -> ModelT:
    head, *rest = path
    if not rest:
        return model.model_copy(update={head: value})
    child = getattr(model, head)
    return model.model_copy(update={head: _set_path(child, tuple(rest), value)})


def merge_config_patch(
    config: GlobalConfiguration, patch: Mapping[str, Any]
) -> GlobalConfiguration:
    """Apply `patch` to `config` and return the new configuration.

    A key that is present in the patch overwrites the mapped field even when
    its value is falsy (``False``, ``0``, ``""``). Keys that are absent leave the
    field untouched. Unknown keys are ignored.
    """
    merged = config
    for column, path in FIELD_PATHS.items():
        if column in patch:
            merged = _set_path(merged, path, patch[column])
    return merged


def set_master_key(config: GlobalConfiguration, tier: str, key: str | None) -> GlobalConfiguration:
    """Mirror a master credential into the slot for `tier`."""
    if tier not in MASTER_KEY_PATHS:
        raise ValueError(f"Unknown credential tier: {tier!r}")
    return _set_path(config, MASTER_KEY_PATHS[tier], key)


def assemble_configuration(
    row: Mapping[str, Any],
    notifications: Iterable[Mapping[str, Any]] = (),
    roadmap_items: Iterable[Mapping[str, Any]] = (),
    master_keys: Mapping[str, str | None] | None = None,
) -> GlobalConfiguration:
    """Build a normalized configuration from raw backend rows.

    Null columns are skipped so every field keeps its explicit default. Collection
    rows that still fail validation are logged and left out.
    """
    present = {column: value for column, value in row.items() if value is not None}
    config = merge_config_patch(GlobalConfiguration(), present)
    config = config.model_copy(
        update={
            "notifications": _validate_rows(Notification, notifications),
            "roadmap_items": _validate_rows(RoadmapItem, roadmap_items),
        }
    )
    for tier, key in (master_keys or {}).items():
        if tier in MASTER_KEY_PATHS:
            config = set_master_key(config, tier, key)
    return config
