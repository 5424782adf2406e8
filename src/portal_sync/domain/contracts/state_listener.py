"""Contract for state-change notifications."""

from collections.abc import Callable

StateListener = Callable[[], None]
