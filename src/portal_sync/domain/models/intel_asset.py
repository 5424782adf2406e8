"""Intel asset domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IntelAsset:
    """Unlockable content record tied to a code or a clearance threshold."""

    id: str
    name: str
    unlock_code: str | None = None
    required_clearance: int = 1
