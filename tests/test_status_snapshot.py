"""Tests for the status snapshot served on /status."""

import json

import pytest

from portal_sync.application import (
    ConfigSynchronizer,
    PollingOrchestrator,
    SessionSynchronizer,
    build_status_snapshot,
)
from portal_sync.domain.models import AuthSession, AuthUser
from tests.fakes import FakeDatabase, FakeIdentityProvider, FakeRemoteControl, InMemoryConfigCache


@pytest.mark.asyncio
async def test_snapshot_is_json_ready_and_hides_credentials() -> None:
    """Given hydrated synchronizers, when building a snapshot, then it serializes without keys."""
    user = AuthUser(id="u1", email="ada@example.net")
    database = FakeDatabase(
        {
            "profiles": [
                {"id": "u1", "username": "ada", "is_approved": True, "mcss_config": {"mcss_api_key": "top-secret"}}
            ],
            "global_config": [{"id": 1}],
            "mcss_configs": [{"id": "admin", "mcss_api_key": "admin-secret"}],
        }
    )
    session_sync = SessionSynchronizer(
        FakeIdentityProvider(session=AuthSession(access_token="t", user=user)), database
    )
    config_sync = ConfigSynchronizer(database, InMemoryConfigCache())
    orchestrator = PollingOrchestrator(adapter=FakeRemoteControl())
    await session_sync.initialize()
    await config_sync.initialize()
    await orchestrator.send_command("noop")
    await orchestrator.probe()
    await orchestrator.send_command("list")

    snapshot = build_status_snapshot(session_sync, config_sync, orchestrator)
    rendered = json.dumps(snapshot)

    assert snapshot["session"] == {
        "status": "READY",
        "loading": False,
        "user": "ada",
        "approved": True,
        "sync_error": None,
    }
    assert snapshot["config"]["status"] == "READY"
    assert snapshot["server"]["state"] == "ONLINE"
    assert snapshot["server"]["limited"] is False
    assert snapshot["server"]["stats"]["cpu_usage"] == 12
    assert snapshot["server"]["log"][-1]["message"] == "[EXEC]: list"
    assert "top-secret" not in rendered
    assert "admin-secret" not in rendered
    session_sync.close()
    config_sync.close()
