"""Adapters for external systems: identity, database, remote control, public server status, cache and web."""
