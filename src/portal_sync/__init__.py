"""Resilient external-state synchronization for the game-server portal."""

__version__ = "0.1.0"
