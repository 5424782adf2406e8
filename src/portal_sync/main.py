"""Main entry point for the portal synchronization service."""

import asyncio
import logging
import sys

import aiohttp

from portal_sync.adapters.cache import JsonFileConfigCache
from portal_sync.adapters.config import AppConfig
from portal_sync.adapters.mcss_api import McssRemoteControlFactory
from portal_sync.adapters.mcsrvstat import McsrvstatLookup
from portal_sync.adapters.supabase import (
    SupabaseDatabase,
    SupabaseHttpClient,
    SupabaseIdentityProvider,
)
from portal_sync.adapters.web import ProxyRelay, WebServer, create_web_app
from portal_sync.application import (
    ConfigSynchronizer,
    ConfigSynchronizerSettings,
    FallbackSettings,
    PollingOrchestrator,
    PollingSettings,
    PublicStatusFallback,
    RemoteControlBinder,
    SessionSynchronizer,
    SessionSynchronizerSettings,
    build_status_snapshot,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def public_status_fallback_from(
    config: AppConfig, session: aiohttp.ClientSession
) -> PublicStatusFallback | None:
    """Build the public status fallback, or None when no status API is configured."""
    if not config.public_status_api_url:
        return None
    return PublicStatusFallback(
        McsrvstatLookup(
            session, config.public_status_api_url, timeout_seconds=config.mcss_timeout_seconds
        ),
        FallbackSettings(
            min_interval_seconds=config.fallback_interval_seconds,
            backoff_seconds=config.fallback_backoff_seconds,
            failure_threshold=config.fallback_failure_threshold,
        ),
    )


def polling_settings_from(config: AppConfig) -> PollingSettings:
    """Translate environment configuration into orchestrator timings."""
    return PollingSettings(
        short_interval_seconds=config.poll_short_interval_seconds,
        long_interval_seconds=config.poll_long_interval_seconds,
        settle_delay_seconds=config.action_settle_seconds,
        startup_grace_seconds=config.startup_grace_seconds,
        log_capacity=config.activity_log_capacity,
    )


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()
    logging.getLogger().setLevel(config.log_level)

    if not config.supabase_anon_key:
        logger.error("SUPABASE_ANON_KEY is not set.")
        logger.error("Set it in the environment or in a .env file next to the service.")
        sys.exit(1)

    # Create aiohttp session for efficient HTTP connections
    async with aiohttp.ClientSession() as session:
        client = SupabaseHttpClient(
            config.supabase_url,
            config.supabase_anon_key,
            session,
            timeout_seconds=config.backend_timeout_seconds,
        )
        database = SupabaseDatabase(client)
        identity_provider = SupabaseIdentityProvider(
            client, refresh_token=config.supabase_refresh_token
        )

        session_sync = SessionSynchronizer(
            identity_provider,
            database,
            SessionSynchronizerSettings(
                safety_timeout_seconds=config.session_safety_timeout_seconds,
                password_reset_redirect_url=config.password_reset_redirect_url,
            ),
        )
        config_sync = ConfigSynchronizer(
            database,
            JsonFileConfigCache(config.config_cache_path),
            ConfigSynchronizerSettings(
                safety_timeout_seconds=config.config_safety_timeout_seconds,
                default_base_url=config.mcss_default_base_url,
            ),
        )
        orchestrator = PollingOrchestrator(
            polling_settings_from(config),
            fallback=public_status_fallback_from(config, session),
        )
        binder = RemoteControlBinder(
            session_sync,
            config_sync,
            orchestrator,
            McssRemoteControlFactory(
                session,
                proxy_url=config.mcss_proxy_url,
                timeout_seconds=config.mcss_timeout_seconds,
            ),
        )

        web_app = create_web_app(
            ProxyRelay(session, timeout_seconds=config.proxy_upstream_timeout_seconds),
            status_provider=lambda: build_status_snapshot(session_sync, config_sync, orchestrator),
            requests_per_minute=config.rate_limit_per_minute,
        )
        web_server = WebServer(web_app, config.host, config.port)

        binder.attach()
        await asyncio.gather(session_sync.initialize(), config_sync.initialize())
        await binder.refresh()
        logger.info(
            f"Session {session_sync.status.value}, configuration {config_sync.status.value}, "
            f"remote control {orchestrator.presentation_state().value}"
        )

        try:
            await web_server.start()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
        finally:
            await web_server.stop()
            await binder.close()
            session_sync.close()
            config_sync.close()


def run() -> None:
    """Synchronous entry point for the service command."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
