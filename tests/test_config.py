"""Tests for configuration adapter."""

import pytest
from pydantic import ValidationError

from portal_sync.adapters.config import AppConfig


def test_config_loads_defaults() -> None:
    """Given no environment variables, when loading config, then defaults are used."""
    config = AppConfig.for_testing()

    assert config.host == "0.0.0.0"
    assert config.port == 8000
    assert config.poll_short_interval_seconds == 5.0
    assert config.poll_long_interval_seconds == 300.0
    assert config.session_safety_timeout_seconds == 6.0
    assert config.proxy_upstream_timeout_seconds == 8.0
    assert config.activity_log_capacity == 5
    assert config.mcss_proxy_url is None


def test_config_loads_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given environment variables, when loading config, then they are used."""
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test/")
    monkeypatch.setenv("MCSS_DEFAULT_BASE_URL", "http://home.example.net:25560/")
    monkeypatch.setenv("POLL_SHORT_INTERVAL_SECONDS", "2.5")

    config = AppConfig.for_testing()

    assert config.port == 9000
    assert config.supabase_url == "https://project.supabase.test"
    assert config.mcss_default_base_url == "http://home.example.net:25560"
    assert config.poll_short_interval_seconds == 2.5


def test_empty_proxy_url_counts_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given an empty proxy URL, when loading config, then remote control calls go direct."""
    monkeypatch.setenv("MCSS_PROXY_URL", "  ")

    assert AppConfig.for_testing().mcss_proxy_url is None


def test_config_rejects_non_positive_timings() -> None:
    """Given a zero timeout, when loading config, then validation fails."""
    with pytest.raises(ValidationError, match="greater than zero"):
        AppConfig.for_testing(session_safety_timeout_seconds=0)


def test_config_rejects_backoff_shorter_than_interval() -> None:
    """Given a long interval below the short one, when loading config, then validation fails."""
    with pytest.raises(ValidationError, match="must not be shorter"):
        AppConfig.for_testing(poll_short_interval_seconds=10, poll_long_interval_seconds=5)


def test_config_validates_log_level() -> None:
    """Given a lowercase or unknown log level, when loading config, then it is normalized or rejected."""
    assert AppConfig.for_testing(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        AppConfig.for_testing(log_level="chatty")


def test_public_status_fallback_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given fallback settings, when loading config, then defaults apply and an empty URL disables it."""
    config = AppConfig.for_testing()
    assert config.public_status_api_url == "https://api.mcsrvstat.us/2"
    assert config.fallback_interval_seconds == 300.0
    assert config.fallback_failure_threshold == 3

    monkeypatch.setenv("PUBLIC_STATUS_API_URL", "")
    assert not AppConfig.for_testing().public_status_api_url

    with pytest.raises(ValidationError, match="at least 1"):
        AppConfig.for_testing(fallback_failure_threshold=0)
