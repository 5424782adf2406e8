"""12-factor configuration adapter using environment variables."""

from typing import Any, Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the status/proxy server to")
    port: int = Field(default=8000, description="Port to bind the status/proxy server to")
    log_level: str = Field(default="INFO", description="Root log level")

    # Identity provider and database backend
    supabase_url: str = Field(
        default="http://localhost:54321", description="Base URL of the Supabase project"
    )
    supabase_anon_key: str = Field(default="", description="Public (anon) API key")
    supabase_refresh_token: str | None = Field(
        default=None,
        description="Refresh token used to restore a session at startup (service deployments)",
    )
    backend_timeout_seconds: float = Field(
        default=10.0, description="Timeout for identity and database requests in seconds"
    )
    password_reset_redirect_url: str = Field(
        default="http://localhost:8000/#/reset-password",
        description="Where password reset mails send the user",
    )

    # Remote control endpoint
    mcss_default_base_url: str | None = Field(
        default=None,
        description="Remote-control base URL used when no admin-configured value exists",
    )
    mcss_api_key: str | None = Field(
        default=None, description="Remote-control API key for the command-line tool"
    )
    mcss_proxy_url: str | None = Field(
        default=None,
        description="Relay endpoint to route remote-control calls through; unset calls directly",
    )
    mcss_timeout_seconds: float = Field(
        default=10.0, description="Timeout for remote-control calls in seconds"
    )
    proxy_upstream_timeout_seconds: float = Field(
        default=8.0, description="Timeout the relay applies to upstream calls in seconds"
    )

    # Public status fallback
    public_status_api_url: str | None = Field(
        default="https://api.mcsrvstat.us/2",
        description="Public server status API consulted while the remote control endpoint is down; empty disables it",
    )
    fallback_interval_seconds: float = Field(
        default=300.0, description="Minimum time between public status lookups"
    )
    fallback_backoff_seconds: float = Field(
        default=900.0, description="Pause after repeated public status lookup failures"
    )
    fallback_failure_threshold: int = Field(
        default=3, description="Consecutive lookup failures that trigger the pause"
    )

    # Synchronizer and polling timings
    session_safety_timeout_seconds: float = Field(
        default=6.0, description="Force TIMEOUT if session hydration has not settled by then"
    )
    config_safety_timeout_seconds: float = Field(
        default=6.0, description="Force TIMEOUT if configuration hydration has not settled by then"
    )
    poll_short_interval_seconds: float = Field(
        default=5.0, description="Probe interval while the endpoint answers"
    )
    poll_long_interval_seconds: float = Field(
        default=300.0, description="Probe interval after a failed probe"
    )
    action_settle_seconds: float = Field(
        default=1.5, description="Wait after a lifecycle action before re-probing"
    )
    startup_grace_seconds: float = Field(
        default=2.2, description="Window in which 'establishing uplink' is shown instead of errors"
    )
    activity_log_capacity: int = Field(
        default=5, description="Number of activity log entries kept in memory"
    )

    # Local persisted cache
    config_cache_path: str = Field(
        default="~/.cache/portal-sync/config_cache.json",
        description="File holding the last successfully fetched configuration",
    )

    # Rate limiting configuration
    rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum number of requests allowed per IP address per minute",
    )

    @field_validator(
        "supabase_url", "mcss_default_base_url", "mcss_proxy_url", "public_status_api_url"
    )
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize URLs; empty strings count as unset."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        return v.rstrip("/")

    @field_validator(
        "session_safety_timeout_seconds",
        "config_safety_timeout_seconds",
        "poll_short_interval_seconds",
        "poll_long_interval_seconds",
        "mcss_timeout_seconds",
        "proxy_upstream_timeout_seconds",
        "backend_timeout_seconds",
        "fallback_interval_seconds",
        "fallback_backoff_seconds",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Timings must be strictly positive."""
        if v <= 0:
            raise ValueError("timings must be greater than zero")
        return v

    @field_validator("activity_log_capacity", "fallback_failure_threshold")
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        """Counts must be at least one."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @model_validator(mode="after")
    def validate_backoff(self) -> Self:
        """The backoff interval may not be shorter than the normal interval."""
        if self.poll_long_interval_seconds < self.poll_short_interval_seconds:
            raise ValueError(
                "poll_long_interval_seconds must not be shorter than poll_short_interval_seconds"
            )
        return self

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a configuration that ignores any local .env file."""
        return cls(_env_file=None, **overrides)
