"""Tolerant normalization of remote server stats payloads.

The remote control endpoint has shipped several payload shapes over time: a
flat object, an object with a ``latest`` sub-object, or an array of samples. Field
names changed case and wording between releases. Every quantity is therefore
looked up through an ordered list of candidate keys.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from portal_sync.domain.errors import StatsNormalizationError
from portal_sync.domain.models.remote_server import RemoteServerStats

CPU_KEYS = ("cpu", "cpuUsage", "CPU")
MEMORY_USED_KEYS = ("memoryUsed", "ramUsage", "Memory", "RAM", "ram")
MEMORY_LIMIT_KEYS = ("memoryLimit", "maxMemory", "TotalMemory", "maxRam")
RAM_PERCENT_KEYS = ("ramUsage", "ram")
ONLINE_PLAYERS_KEYS = ("playersOnline", "onlinePlayers", "OnlinePlayers")
MAX_PLAYERS_KEYS = ("playerLimit", "maxPlayers", "MaxPlayers")
UPTIME_KEYS = ("uptime", "Uptime")

ZERO_UPTIME = "00:00:00"


def _probe_key(sources: Sequence[Mapping[str, Any]], key: str) -> Any:
    for source in sources:
        value = source.get(key)
        if value is not None:
            return value

    wanted = key.lower()
    for source in sources:
        for candidate, value in source.items():
            if isinstance(candidate, str) and candidate.lower() == wanted and value is not None:
                return value
    return None


def probe(sources: Sequence[Mapping[str, Any]], keys: Sequence[str]) -> Any:
    """Return the first value found for `keys`, in priority order.

    For each key the sources are checked in order (nested object first, then
    root), exact match first, then a case-insensitive scan.
    """
    for key in keys:
        value = _probe_key(sources, key)
        if value is not None:
            return value
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%"))
        except ValueError:
            return None
    return None


def format_uptime(value: Any) -> str:
    """Format seconds as HH:MM:SS; strings pass through; missing is zero."""
    if value is None or value == "":
        return ZERO_UPTIME
    if isinstance(value, str):
        return value
    seconds = _as_number(value)
    if seconds is None or seconds < 0:
        return ZERO_UPTIME
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _compute_ram_usage(sources: Sequence[Mapping[str, Any]]) -> float:
    used = _as_number(probe(sources, MEMORY_USED_KEYS))
    limit = _as_number(probe(sources, MEMORY_LIMIT_KEYS))
    if used is not None and limit is not None and limit > 0:
        return math.floor(used * 100 / limit + 0.5)

    raw_percent = _as_number(probe(sources, RAM_PERCENT_KEYS))
    return raw_percent if raw_percent is not None else 0


def _unwrap(payload: Any) -> Mapping[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, list):
        if not payload:
            return {}
        payload = payload[-1]
    if not isinstance(payload, Mapping):
        raise StatsNormalizationError(
            f"Could not normalize stats payload of type {type(payload).__name__}"
        )
    return payload


def normalize_stats(payload: Any) -> RemoteServerStats:
    """Turn an untyped stats payload into RemoteServerStats.

    Raises:
        StatsNormalizationError: If the payload is neither a mapping nor a list of mappings.
    """
    root = _unwrap(payload)
    latest = root.get("latest")
    sources: list[Mapping[str, Any]] = [latest, root] if isinstance(latest, Mapping) else [root]

    cpu = _as_number(probe(sources, CPU_KEYS))
    online = _as_number(probe(sources, ONLINE_PLAYERS_KEYS))
    max_players = _as_number(probe(sources, MAX_PLAYERS_KEYS))

    return RemoteServerStats(
        cpu_usage=cpu if cpu is not None else 0,
        ram_usage=_compute_ram_usage(sources),
        online_players=int(online) if online is not None else 0,
        max_players=int(max_players) if max_players is not None else 0,
        uptime=format_uptime(probe(sources, UPTIME_KEYS)),
    )
