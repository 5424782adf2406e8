"""Tests for CLI helper functions."""

import json
from argparse import Namespace

import pytest

from portal_sync.cli import build_parser, format_servers, format_stats, run_command, to_json
from portal_sync.domain.models import RemoteServerHandle, RemoteServerStats, ServerStatus
from tests.fakes import FakeRemoteControl

SERVERS = [
    RemoteServerHandle(server_id="srv-1", status=ServerStatus.ONLINE, name="Main", description="Survival"),
    RemoteServerHandle(server_id="srv-2", status=ServerStatus.OFFLINE),
]


def test_format_servers_lists_each_server() -> None:
    """Given two servers, when formatting, then names, states and ids are shown."""
    output = format_servers(SERVERS)

    assert "Found 2 server(s)" in output
    assert "Main [ONLINE]" in output
    assert "ID: srv-1" in output
    assert "Survival" in output
    assert "Unnamed [OFFLINE]" in output


def test_format_servers_without_servers() -> None:
    """Given no servers, when formatting, then a hint is returned."""
    assert format_servers([]) == "No servers reported by the endpoint."


def test_format_stats() -> None:
    """Given telemetry, when formatting, then every figure appears."""
    stats = RemoteServerStats(cpu_usage=12.5, ram_usage=40, online_players=3, max_players=20, uptime="01:02:03")

    output = format_stats("srv-1", stats)

    assert output.splitlines()[0] == "Server srv-1"
    assert "CPU:     12.5%" in output
    assert "Players: 3/20" in output
    assert "Uptime:  01:02:03" in output


def test_to_json_serializes_dataclasses() -> None:
    """Given dataclasses and lists of them, when serializing, then plain JSON comes out."""
    assert json.loads(to_json(SERVERS))[0] == {
        "server_id": "srv-1",
        "status": 1,
        "name": "Main",
        "description": "Survival",
        "type": "",
    }
    assert json.loads(to_json(RemoteServerStats(cpu_usage=5)))["cpu_usage"] == 5
    assert json.loads(to_json(["a", "b"])) == ["a", "b"]


def test_parser_reads_subcommands() -> None:
    """Given CLI arguments, when parsing, then subcommand options are available."""
    parser = build_parser()

    args = parser.parse_args(["--base-url", "http://mc.test", "console", "--lines", "20", "--json"])

    assert args.base_url == "http://mc.test"
    assert args.command == "console"
    assert args.lines == 20
    assert args.json is True
    assert args.server is None

    args = parser.parse_args(["action", "Restart", "--server", "srv-2"])
    assert (args.command, args.name, args.server) == ("action", "Restart", "srv-2")


@pytest.mark.asyncio
async def test_run_command_defaults_to_first_server(capsys: pytest.CaptureFixture[str]) -> None:
    """Given no --server, when running exec, then the first reported server receives the command."""
    client = FakeRemoteControl(servers=SERVERS)

    await run_command(Namespace(command="exec", text="say hi", server=None), client)

    assert client.commands == [("srv-1", "say hi")]
    assert capsys.readouterr().out.strip() == "[EXEC]: say hi"


@pytest.mark.asyncio
async def test_run_command_action_uses_explicit_server(capsys: pytest.CaptureFixture[str]) -> None:
    """Given --server, when running an action, then it is dispatched to that server."""
    client = FakeRemoteControl(servers=SERVERS)

    await run_command(Namespace(command="action", name="Stop", server="srv-2"), client)

    assert client.actions == [("srv-2", "Stop")]
    assert "Stop dispatched to srv-2" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_command_console_as_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Given --json, when running console, then lines are printed as a JSON list."""
    client = FakeRemoteControl()
    client.console_lines = ["one", "two", "three"]

    await run_command(Namespace(command="console", server=None, lines=2, json=True), client)

    assert json.loads(capsys.readouterr().out) == ["two", "three"]
