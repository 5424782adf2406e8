"""Identity domain model."""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class Identity:
    """The signed-in user's profile as seen by the portal."""

    id: str
    email: str
    username: str = "User"
    is_admin: bool = False
    is_approved: bool = False
    avatar_url: str | None = None
    mcss_config_id: str | None = None
    permissions: dict[str, bool] = field(default_factory=dict)
    read_banner_ids: list[str] = field(default_factory=list)
    clearance_level: int = 1
    experience_points: int = 0

    @classmethod
    def from_profile_row(
        cls,
        user_id: str,
        email: str,
        row: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> "Identity":
        """Build an identity from a raw `profiles` row.

        Null columns fall back to defaults so consumers never see None
        collections.
        """
        metadata = metadata or {}
        return cls(
            id=user_id,
            email=email or "",
            username=row.get("username") or metadata.get("username") or "User",
            is_admin=bool(row.get("is_admin")),
            is_approved=bool(row.get("is_approved")),
            avatar_url=row.get("avatar_url"),
            mcss_config_id=row.get("mcss_config_id"),
            permissions=dict(row.get("permissions") or {}),
            read_banner_ids=list(row.get("read_banner_ids") or []),
            clearance_level=row.get("clearance_level") or 1,
            experience_points=row.get("experience_points") or 0,
        )

    def with_updates(self, updates: dict[str, Any]) -> "Identity":
        """Return a copy with the known profile columns in `updates` applied."""
        known = {key: value for key, value in updates.items() if key in _PROFILE_FIELDS}
        return replace(self, **known)


_PROFILE_FIELDS = frozenset(
    {
        "username",
        "is_admin",
        "is_approved",
        "avatar_url",
        "mcss_config_id",
        "permissions",
        "read_banner_ids",
        "clearance_level",
        "experience_points",
    }
)
