"""JSON-friendly snapshot of the synchronization layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from portal_sync.application.config_synchronizer import ConfigSynchronizer
    from portal_sync.application.polling_orchestrator import PollingOrchestrator
    from portal_sync.application.session_synchronizer import SessionSynchronizer


def build_status_snapshot(
    session_synchronizer: SessionSynchronizer,
    config_synchronizer: ConfigSynchronizer,
    orchestrator: PollingOrchestrator,
) -> dict[str, Any]:
    """Aggregate status for dashboards. Never exposes credentials."""
    identity = session_synchronizer.identity
    session = orchestrator.session
    stats = session.stats
    return {
        "session": {
            "status": session_synchronizer.status.value,
            "loading": session_synchronizer.loading,
            "user": identity.username if identity else None,
            "approved": identity.is_approved if identity else False,
            "sync_error": session_synchronizer.sync_error,
        },
        "config": {
            "status": config_synchronizer.status.value,
            "error": config_synchronizer.error,
            "dashboard_enabled": config_synchronizer.is_dashboard_enabled,
        },
        "server": {
            "state": orchestrator.presentation_state().value,
            "server_id": session.server_id,
            "reachable": session.reachable,
            "status_text": session.status_text,
            "limited": session.public_status is not None,
            "latency_ms": session.latency_ms,
            "action_in_flight": session.action_in_flight,
            "stats": (
                {
                    "cpu_usage": stats.cpu_usage,
                    "ram_usage": stats.ram_usage,
                    "online_players": stats.online_players,
                    "max_players": stats.max_players,
                    "uptime": stats.uptime,
                }
                if stats
                else None
            ),
            "log": [
                {"timestamp": e.timestamp.isoformat(), "tag": e.tag, "message": e.message}
                for e in session.log
            ],
        },
    }
