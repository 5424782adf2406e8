"""Result of an unlock-by-code attempt."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UnlockResult:
    """Outcome shown to the user after submitting an unlock code."""

    success: bool
    message: str
