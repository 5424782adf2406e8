"""Command-line access to the remote control endpoint."""

import asyncio
import dataclasses
import json
import sys
from typing import Any

import aiohttp

from portal_sync.adapters.config import AppConfig
from portal_sync.adapters.mcss_api import McssRemoteControl
from portal_sync.domain.errors import RemoteControlError
from portal_sync.domain.models.remote_server import RemoteServerHandle, RemoteServerStats


def format_servers(servers: list[RemoteServerHandle]) -> str:
    """Human-readable server list."""
    if not servers:
        return "No servers reported by the endpoint."
    lines = [f"\nFound {len(servers)} server(s):\n"]
    for server in servers:
        lines.append(f"  {server.name or 'Unnamed'} [{server.status.name}]")
        lines.append(f"    ID: {server.server_id}")
        if server.description:
            lines.append(f"    {server.description}")
        lines.append("")
    return "\n".join(lines)


def format_stats(server_id: str, stats: RemoteServerStats) -> str:
    """Human-readable telemetry block."""
    return "\n".join(
        [
            f"Server {server_id}",
            f"  CPU:     {stats.cpu_usage}%",
            f"  RAM:     {stats.ram_usage}%",
            f"  Players: {stats.online_players}/{stats.max_players}",
            f"  Uptime:  {stats.uptime}",
        ]
    )


def to_json(value: Any) -> str:
    """Serialize dataclasses (and lists of them) for --json output."""
    if isinstance(value, list):
        value = [dataclasses.asdict(v) if dataclasses.is_dataclass(v) else v for v in value]
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    return json.dumps(value, indent=2, ensure_ascii=False)


async def _resolve_server_id(client: McssRemoteControl, server_id: str | None) -> str:
    if server_id:
        return server_id
    servers = await client.list_servers()
    if not servers:
        raise RemoteControlError("Remote endpoint reports no servers")
    return servers[0].server_id


async def run_command(args: Any, client: McssRemoteControl) -> None:
    """Execute one parsed CLI command against the endpoint."""
    if args.command == "servers":
        servers = await client.list_servers()
        print(to_json(servers) if args.json else format_servers(servers))

    elif args.command == "stats":
        server_id = await _resolve_server_id(client, args.server)
        stats = await client.get_server_stats(server_id)
        print(to_json(stats) if args.json else format_stats(server_id, stats))

    elif args.command == "console":
        server_id = await _resolve_server_id(client, args.server)
        lines = await client.get_console(server_id, args.lines)
        print(to_json(lines) if args.json else "\n".join(lines))

    elif args.command == "exec":
        server_id = await _resolve_server_id(client, args.server)
        await client.execute_command(server_id, args.text)
        print(f"[EXEC]: {args.text}")

    elif args.command == "action":
        server_id = await _resolve_server_id(client, args.server)
        await client.execute_action(server_id, args.name)
        print(f"{args.name} dispatched to {server_id}")


def build_parser() -> Any:
    """Argument parser for the remote control CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Remote control helper for the game server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List servers known to the endpoint
  portal-sync-cli servers

  # Show telemetry of the first server
  portal-sync-cli stats

  # Tail the console
  portal-sync-cli console --lines 20

  # Send a console command
  portal-sync-cli exec "say hello"

  # Restart a specific server
  portal-sync-cli action Restart --server 1a2b3c
        """,
    )
    parser.add_argument("--base-url", help="Endpoint base URL (default: MCSS_DEFAULT_BASE_URL)")
    parser.add_argument("--api-key", help="Endpoint API key (default: MCSS_API_KEY)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    servers_parser = subparsers.add_parser("servers", help="List servers")
    servers_parser.add_argument("--json", action="store_true", help="Output as JSON")

    stats_parser = subparsers.add_parser("stats", help="Show server telemetry")
    stats_parser.add_argument("--server", help="Server ID (default: first server)")
    stats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    console_parser = subparsers.add_parser("console", help="Show recent console lines")
    console_parser.add_argument("--server", help="Server ID (default: first server)")
    console_parser.add_argument("--lines", type=int, default=50, help="Number of lines")
    console_parser.add_argument("--json", action="store_true", help="Output as JSON")

    exec_parser = subparsers.add_parser("exec", help="Send a console command")
    exec_parser.add_argument("text", help="Command text")
    exec_parser.add_argument("--server", help="Server ID (default: first server)")

    action_parser = subparsers.add_parser("action", help="Dispatch a lifecycle action")
    action_parser.add_argument("name", help="Start, Stop, Kill, Restart or a numeric code")
    action_parser.add_argument("--server", help="Server ID (default: first server)")

    return parser


async def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig()
    base_url = args.base_url or config.mcss_default_base_url
    api_key = args.api_key or config.mcss_api_key
    if not base_url or not api_key:
        print("Error: endpoint base URL and API key are required.", file=sys.stderr)
        sys.exit(1)

    try:
        async with aiohttp.ClientSession() as session:
            client = McssRemoteControl(
                base_url,
                api_key,
                session,
                proxy_url=config.mcss_proxy_url,
                timeout_seconds=config.mcss_timeout_seconds,
            )
            await run_command(args, client)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except (RemoteControlError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
