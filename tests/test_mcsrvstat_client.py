"""Tests for the mcsrvstat.us public status client."""

import aiohttp
import pytest

from portal_sync.adapters.mcsrvstat import McsrvstatLookup
from portal_sync.adapters.mcsrvstat.status_client import parse_public_status
from portal_sync.domain.errors import RemoteControlError
from portal_sync.domain.models import PublicServerStatus
from tests.fakes import FakeHttpResponse, FakeHttpSession


def test_parse_reads_player_counts() -> None:
    """Given an online reply, when parsing, then player counts are taken from it."""
    status = parse_public_status({"online": True, "players": {"online": 4, "max": 50}})

    assert status == PublicServerStatus(online=True, online_players=4, max_players=50)


def test_parse_defaults_missing_players() -> None:
    """Given an offline reply without players, when parsing, then counts fall back to 0 of 20."""
    assert parse_public_status({"online": False}) == PublicServerStatus(online=False)


def test_parse_rejects_non_object() -> None:
    """Given a list payload, when parsing, then a RemoteControlError is raised."""
    with pytest.raises(RemoteControlError):
        parse_public_status(["online"])


@pytest.mark.asyncio
async def test_lookup_requests_address_under_base_url() -> None:
    """Given a base URL, when looking up an address, then the address is appended as a path segment."""
    session = FakeHttpSession(
        lambda *_: FakeHttpResponse(200, {"online": True, "players": {"online": 1, "max": 10}})
    )
    lookup = McsrvstatLookup(session, base_url="https://status.example.net/2/")

    status = await lookup.lookup("play.example.net")

    method, url, _ = session.requests[0]
    assert (method, url) == ("GET", "https://status.example.net/2/play.example.net")
    assert status.online_players == 1


@pytest.mark.asyncio
async def test_non_json_reply_is_an_error() -> None:
    """Given an HTML reply, when looking up, then a RemoteControlError is raised."""
    session = FakeHttpSession(
        lambda *_: FakeHttpResponse(200, "<html></html>", headers={"Content-Type": "text/html"})
    )

    with pytest.raises(RemoteControlError, match="Status API error: 200"):
        await McsrvstatLookup(session).lookup("play.example.net")


@pytest.mark.asyncio
async def test_http_error_status_is_an_error() -> None:
    """Given a 503 reply, when looking up, then the status code is kept on the error."""
    session = FakeHttpSession(lambda *_: FakeHttpResponse(503, {"error": "down"}))

    with pytest.raises(RemoteControlError) as info:
        await McsrvstatLookup(session).lookup("play.example.net")
    assert info.value.status_code == 503


@pytest.mark.asyncio
async def test_network_failure_is_wrapped() -> None:
    """Given a connection error, when looking up, then it surfaces as RemoteControlError."""

    def fail(*_: object) -> FakeHttpResponse:
        raise aiohttp.ClientConnectionError("refused")

    with pytest.raises(RemoteControlError, match="Status lookup for play.example.net failed"):
        await McsrvstatLookup(FakeHttpSession(fail)).lookup("play.example.net")
