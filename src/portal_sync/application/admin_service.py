"""Admin-side writes that keep cross-entity references consistent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from portal_sync.domain.errors import BackendError

if TYPE_CHECKING:
    from portal_sync.application.config_synchronizer import ConfigSynchronizer
    from portal_sync.domain.ports import DatabaseBackend

logger = logging.getLogger(__name__)

SHARED_CREDENTIAL_TIERS = frozenset({"standard", "admin"})


def credential_tier_for(is_admin: bool, is_approved: bool) -> str | None:
    """Credential tier a user is entitled to: approved admins get 'admin', approved users 'standard'."""
    if not is_approved:
        return None
    return "admin" if is_admin else "standard"


class AdminService:
    """Operations behind the admin console."""

    def __init__(
        self,
        database: DatabaseBackend,
        config_synchronizer: ConfigSynchronizer | None = None,
    ) -> None:
        self._database = database
        self._config_synchronizer = config_synchronizer

    async def delete_notification(self, notification_id: str) -> int:
        """Delete a notification and every read-marker pointing at it.

        Returns:
            Number of profiles whose read list referenced the notification.
        """
        try:
            await self._database.delete("profile_read_banners", {"banner_id": notification_id})
        except BackendError as e:
            logger.error(f"Failed to clean up read markers for banner {notification_id}: {e}")

        cleaned = 0
        profiles = await self._database.select("profiles", "id, read_banner_ids")
        for profile in profiles:
            read_ids = profile.get("read_banner_ids") or []
            if notification_id not in read_ids:
                continue
            remaining = [banner_id for banner_id in read_ids if banner_id != notification_id]
            await self._database.update(
                "profiles", {"read_banner_ids": remaining}, {"id": profile["id"]}
            )
            cleaned += 1

        await self._database.delete("notifications", {"id": notification_id})
        if self._config_synchronizer is not None:
            self._config_synchronizer.remove_notification(notification_id)

        logger.info(f"Deleted notification {notification_id}, cleaned {cleaned} profile(s)")
        return cleaned

    async def update_user_status(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Update a profile and keep its credential tier in step with its role flags."""
        rows = await self._database.update("profiles", updates, {"id": user_id})
        profile = {**(rows[0] if rows else {}), **updates}

        if "is_admin" in updates or "is_approved" in updates:
            tier = credential_tier_for(
                bool(profile.get("is_admin")), bool(profile.get("is_approved"))
            )
            logger.debug(f"Assigning credential tier for {user_id}: {tier}")
            try:
                await self._database.update("profiles", {"mcss_config_id": tier}, {"id": user_id})
                profile["mcss_config_id"] = tier
            except BackendError as e:
                logger.error(f"Credential tier assignment failed for {user_id}: {e}")
        return profile

    async def delete_user(self, user_id: str) -> None:
        """Remove a profile and its private credential row."""
        await self._database.delete("profiles", {"id": user_id})

        if user_id in SHARED_CREDENTIAL_TIERS:
            return
        try:
            await self._database.delete("mcss_configs", {"id": user_id})
        except BackendError as e:
            logger.warning(f"Private credential cleanup failed for {user_id} (minor): {e}")
