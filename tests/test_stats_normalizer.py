"""Tests for the stats normalizer."""

import pytest

from portal_sync.domain.errors import StatsNormalizationError
from portal_sync.domain.models import RemoteServerStats
from portal_sync.domain.stats_normalizer import format_uptime, normalize_stats, probe


def test_nested_latest_with_memory_ratio() -> None:
    """Given a payload with a nested latest block, when normalizing, then ram is computed from used and limit."""
    payload = {
        "latest": {
            "cpu": 12.5,
            "memoryUsed": 2048,
            "memoryLimit": 8192,
            "playersOnline": 4,
            "playerLimit": 20,
            "uptime": 3725,
        }
    }

    stats = normalize_stats(payload)

    assert stats == RemoteServerStats(
        cpu_usage=12.5, ram_usage=25, online_players=4, max_players=20, uptime="01:02:05"
    )


def test_case_insensitive_keys_and_computed_ratio() -> None:
    """Given differently cased keys, when normalizing, then they are found and the ratio computed."""
    payload = {"CPU": 50, "Memory": 1024, "TotalMemory": 4096, "Uptime": "02:00:00"}

    stats = normalize_stats(payload)

    assert stats.cpu_usage == 50
    assert stats.ram_usage == 25
    assert stats.uptime == "02:00:00"


def test_lowercase_variant_found_by_scan() -> None:
    """Given only a lowercased key variant, when probing, then the case-insensitive scan finds it."""
    assert probe([{"cpuusage": 7}], ("cpuUsage",)) == 7


def test_array_payload_uses_last_element() -> None:
    """Given an array payload, when normalizing, then the most recent sample is used."""
    payload = [{"cpu": 10, "ram": 20}, {"cpu": 30, "ram": 40}]

    stats = normalize_stats(payload)

    assert stats.cpu_usage == 30
    assert stats.ram_usage == 40


def test_latest_wins_over_root() -> None:
    """Given the same key at both levels, when normalizing, then the nested value wins."""
    stats = normalize_stats({"cpu": 99, "latest": {"cpu": 1}})

    assert stats.cpu_usage == 1


def test_raw_percent_used_when_limit_is_zero() -> None:
    """Given a zero memory limit, when normalizing, then the raw ram percent is used."""
    stats = normalize_stats({"memoryLimit": 0, "ramUsage": 63})

    assert stats.ram_usage == 63


def test_empty_payloads_yield_zeros() -> None:
    """Given empty or missing payloads, when normalizing, then every field is zero."""
    assert normalize_stats({}) == RemoteServerStats()
    assert normalize_stats([]) == RemoteServerStats()
    assert normalize_stats(None) == RemoteServerStats()


def test_non_mapping_payload_raises() -> None:
    """Given a bare string payload, when normalizing, then a normalization error is raised."""
    with pytest.raises(StatsNormalizationError):
        normalize_stats("offline")


def test_boolean_values_are_not_numbers() -> None:
    """Given boolean telemetry values, when normalizing, then they count as absent."""
    stats = normalize_stats({"cpu": True, "playersOnline": False})

    assert stats.cpu_usage == 0
    assert stats.online_players == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "00:00:00"),
        ("", "00:00:00"),
        (59, "00:00:59"),
        (90061, "25:01:01"),
        ("3 days", "3 days"),
    ],
)
def test_format_uptime(value: object, expected: str) -> None:
    """Given different uptime shapes, when formatting, then hours are not wrapped at 24."""
    assert format_uptime(value) == expected


@pytest.mark.parametrize(
    ("used", "limit", "expected"),
    [(1, 200, 1), (3, 200, 2), (5, 200, 3), (1, 300, 0)],
)
def test_memory_ratio_rounds_half_up(used: int, limit: int, expected: int) -> None:
    """Given a ratio ending in .5, when normalizing, then it rounds up like the dashboard does."""
    stats = normalize_stats({"memoryUsed": used, "memoryLimit": limit})

    assert stats.ram_usage == expected
