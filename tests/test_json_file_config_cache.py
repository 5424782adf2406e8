"""Tests for the JSON file configuration cache."""

from pathlib import Path

from portal_sync.adapters.cache import JsonFileConfigCache


def test_store_then_load(tmp_path: Path) -> None:
    """Given a stored value, when loading it from a new instance, then it survives."""
    path = tmp_path / "nested" / "cache.json"
    JsonFileConfigCache(path).store("global_config", {"siteInfo": {"title": "Portal"}})

    assert JsonFileConfigCache(path).load("global_config") == {"siteInfo": {"title": "Portal"}}


def test_missing_file_and_key(tmp_path: Path) -> None:
    """Given no cache file, when loading, then None is returned."""
    cache = JsonFileConfigCache(tmp_path / "cache.json")

    assert cache.load("global_config") is None
    cache.store("other", {"a": 1})
    assert cache.load("global_config") is None


def test_corrupt_file_is_ignored_and_replaced(tmp_path: Path) -> None:
    """Given a corrupt cache file, when loading and storing, then it is treated as empty."""
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = JsonFileConfigCache(path)

    assert cache.load("global_config") is None
    cache.store("global_config", {"ok": True})
    assert cache.load("global_config") == {"ok": True}
    assert list(tmp_path.iterdir()) == [path]


def test_store_keeps_other_keys(tmp_path: Path) -> None:
    """Given two keys, when storing the second, then the first is kept."""
    cache = JsonFileConfigCache(tmp_path / "cache.json")

    cache.store("a", {"v": 1})
    cache.store("b", {"v": 2})

    assert cache.load("a") == {"v": 1}
    assert cache.load("b") == {"v": 2}
