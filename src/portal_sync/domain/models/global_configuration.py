"""Global configuration domain model.

The model is serialized with camelCase aliases, which is the shape stored in the
local cache and handed to presentation consumers.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class SiteInfo(_ConfigModel):
    """Site metadata."""

    title: str = "Server Portal"
    description: str = ""


class CountdownConfig(_ConfigModel):
    """Countdown target shown on the landing page."""

    enabled: bool = False
    date: str | None = None
    title: str = ""


class ServerMetadata(_ConfigModel):
    """Public facts about the game server."""

    ip: str = ""
    modpack_version: str = ""


class Socials(_ConfigModel):
    """Links to community channels."""

    discord: str | None = None


class McssSettings(_ConfigModel):
    """Remote-control settings, including the two master credential slots."""

    enabled: bool = False
    default_base_url: str | None = None
    master_standard_key: str | None = None
    master_admin_key: str | None = None


class Notification(_ConfigModel):
    """An admin-authored broadcast banner."""

    id: str
    title: str = ""
    subtitle: str = ""
    message: str = ""
    icon: str = "info"
    style: str = "info"
    enabled: bool = True
    created_at: str | None = None


class RoadmapItem(_ConfigModel):
    """A card on the public roadmap board."""

    id: str
    title: str = ""
    description: str = ""
    column: str = "PLANNED"
    category: str | None = None
    priority: str | None = None
    progress: int | None = None
    created_at: str | None = None


class GlobalConfiguration(_ConfigModel):
    """Process-wide configuration assembled from the backend."""

    site_info: SiteInfo = Field(default_factory=SiteInfo)
    countdown: CountdownConfig = Field(default_factory=CountdownConfig)
    is_emergency_enabled: bool = False
    is_terminal_enabled: bool = False
    is_intel_enabled: bool = False
    is_dashboard_enabled: bool = True
    server_metadata: ServerMetadata = Field(default_factory=ServerMetadata)
    socials: Socials = Field(default_factory=Socials)
    mcss: McssSettings = Field(default_factory=McssSettings)
    notifications: list[Notification] = Field(default_factory=list)
    roadmap_items: list[RoadmapItem] = Field(default_factory=list)

    def to_cache(self) -> dict:
        """Serialize to the camelCase shape kept in the local cache."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_cache(cls, data: dict) -> "GlobalConfiguration":
        """Rebuild a configuration from a cached payload."""
        return cls.model_validate(data)
