"""Hand-written fakes for the domain ports."""

import asyncio
import copy
import json
from collections.abc import Callable, Mapping
from typing import Any

from portal_sync.domain.errors import AuthFailure, RemoteControlError
from portal_sync.domain.models import (
    AuthEvent,
    AuthSession,
    AuthUser,
    PublicServerStatus,
    RemoteServerHandle,
    RemoteServerStats,
    ServerStatus,
)


class FakeDatabase:
    """In-memory tables with equality filters.

    ``gates`` holds events a read on a table waits for; ``failures`` maps
    ``(operation, table)`` to an exception raised instead of the operation.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.uploads: dict[str, bytes] = {}

    async def _enter(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        gate = self.gates.get(table)
        if gate is not None and operation.startswith("select"):
            await gate.wait()
        failure = self.failures.get((operation, table))
        if failure is not None:
            raise failure

    def _matching(self, table: str, filters: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        rows = self.tables.setdefault(table, [])
        return [r for r in rows if all(r.get(k) == v for k, v in (filters or {}).items())]

    def count(self, operation: str, table: str) -> int:
        return self.calls.count((operation, table))

    async def select(
        self,
        table: str,
        columns: str = "*",  # noqa: ARG002
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        await self._enter("select", table)
        rows = [copy.deepcopy(r) for r in self._matching(table, filters)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=not ascending)
        return rows

    async def select_one(
        self,
        table: str,
        columns: str = "*",  # noqa: ARG002
        filters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        await self._enter("select_one", table)
        rows = self._matching(table, filters)
        return copy.deepcopy(rows[0]) if rows else None

    async def insert(self, table: str, rows: Any) -> list[dict[str, Any]]:
        await self._enter("insert", table)
        new_rows = [dict(r) for r in (rows if isinstance(rows, list) else [rows])]
        self.tables.setdefault(table, []).extend(new_rows)
        return new_rows

    async def update(
        self, table: str, values: dict[str, Any], filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        await self._enter("update", table)
        matched = self._matching(table, filters)
        for row in matched:
            row.update(values)
        return [dict(r) for r in matched]

    async def upsert(self, table: str, rows: Any) -> list[dict[str, Any]]:
        await self._enter("upsert", table)
        new_rows = [dict(r) for r in (rows if isinstance(rows, list) else [rows])]
        existing = self.tables.setdefault(table, [])
        for row in new_rows:
            key = {k: row[k] for k in ("id", "profile_id", "banner_id") if k in row}
            match = next((r for r in existing if all(r.get(k) == v for k, v in key.items())), None)
            if match is not None and key:
                match.update(row)
            else:
                existing.append(row)
        return new_rows

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        await self._enter("delete", table)
        matched = self._matching(table, filters)
        self.tables[table] = [r for r in self.tables[table] if r not in matched]

    async def upload_file(
        self, bucket: str, path: str, content: bytes, content_type: str = ""  # noqa: ARG002
    ) -> None:
        await self._enter("upload", bucket)
        self.uploads[f"{bucket}/{path}"] = content

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://storage.test/{bucket}/{path}"


class FakeIdentityProvider:
    """Identity provider with a fixed account table that emits session events."""

    def __init__(
        self,
        accounts: dict[str, tuple[str, AuthUser]] | None = None,
        session: AuthSession | None = None,
    ) -> None:
        self.accounts = accounts or {}
        self.session = session
        self.listeners: list[Callable[..., Any]] = []
        self.session_gate: asyncio.Event | None = None
        self.session_error: Exception | None = None
        self.reset_requests: list[tuple[str, str]] = []
        self.password_updates: list[str] = []

    def emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthFailure("Invalid login credentials")
        self.session = AuthSession(access_token=f"token-{email}", user=account[1])
        self.emit(AuthEvent.SIGNED_IN, self.session)
        return self.session

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthSession | None:
        if email in self.accounts:
            raise AuthFailure("User already registered")
        user = AuthUser(id=f"user-{len(self.accounts) + 1}", email=email, metadata=metadata or {})
        self.accounts[email] = (password, user)
        return None

    async def sign_out(self) -> None:
        self.session = None
        self.emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> AuthSession | None:
        if self.session_gate is not None:
            await self.session_gate.wait()
        if self.session_error is not None:
            raise self.session_error
        return self.session

    def subscribe(self, listener: Callable[..., Any]) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        self.reset_requests.append((email, redirect_to))

    async def update_user(self, password: str) -> None:
        self.password_updates.append(password)


class FakeRemoteControl:
    """Remote control endpoint with switchable reachability."""

    def __init__(
        self,
        servers: list[RemoteServerHandle] | None = None,
        stats: RemoteServerStats | None = None,
    ) -> None:
        self.servers = (
            servers
            if servers is not None
            else [RemoteServerHandle(server_id="srv-1", status=ServerStatus.ONLINE, name="Main")]
        )
        self.stats = stats or RemoteServerStats(cpu_usage=12, ram_usage=40, online_players=3)
        self.reachable = True
        self.action_gate: asyncio.Event | None = None
        self.stats_gate: asyncio.Event | None = None
        self.action_error: Exception | None = None
        self.actions: list[tuple[str, str | int]] = []
        self.commands: list[tuple[str, str]] = []
        self.console_lines = ["[INFO] Server started"]
        self.stats_calls = 0

    def _check(self) -> None:
        if not self.reachable:
            raise RemoteControlError("Connection refused")

    async def list_servers(self) -> list[RemoteServerHandle]:
        self._check()
        return list(self.servers)

    async def get_console(self, server_id: str, line_count: int = 50) -> list[str]:  # noqa: ARG002
        self._check()
        return self.console_lines[-line_count:]

    async def execute_command(self, server_id: str, command: str) -> None:
        self._check()
        self.commands.append((server_id, command))

    async def get_server_stats(self, server_id: str) -> RemoteServerStats:  # noqa: ARG002
        self.stats_calls += 1
        if self.stats_gate is not None:
            await self.stats_gate.wait()
        self._check()
        return self.stats

    async def execute_action(self, server_id: str, action: str | int) -> None:
        self.actions.append((server_id, action))
        if self.action_gate is not None:
            await self.action_gate.wait()
        if self.action_error is not None:
            raise self.action_error


class FakePublicStatusLookup:
    """Public status API returning a fixed status or raising `error`."""

    def __init__(self, status: PublicServerStatus | None = None) -> None:
        self.status = status or PublicServerStatus(online=True, online_players=2, max_players=10)
        self.error: Exception | None = None
        self.addresses: list[str] = []

    async def lookup(self, address: str) -> PublicServerStatus:
        self.addresses.append(address)
        if self.error is not None:
            raise self.error
        return self.status


class InMemoryConfigCache:
    """ConfigCache kept in a dict."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self.data: dict[str, dict[str, Any]] = dict(initial or {})

    def load(self, key: str) -> dict[str, Any] | None:
        return self.data.get(key)

    def store(self, key: str, value: dict[str, Any]) -> None:
        self.data[key] = value


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until `predicate` holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


class FakeHttpResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(
        self, status: int = 200, body: Any = None, headers: dict[str, str] | None = None
    ) -> None:
        self.status = status
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        if body is None:
            self._raw = b""
        elif isinstance(body, bytes):
            self._raw = body
        elif isinstance(body, str):
            self._raw = body.encode()
        else:
            self._raw = json.dumps(body).encode()

    async def text(self) -> str:
        return self._raw.decode()

    async def read(self) -> bytes:
        return self._raw

    async def __aenter__(self) -> "FakeHttpResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class FakeHttpSession:
    """Records requests and answers them from a handler.

    The handler receives ``(method, url, kwargs)`` and returns a
    FakeHttpResponse or raises, like aiohttp would on network failure.
    """

    def __init__(
        self, handler: Callable[[str, str, dict[str, Any]], FakeHttpResponse] | None = None
    ) -> None:
        self.handler = handler or (lambda *_: FakeHttpResponse(200, []))
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeHttpResponse:
        self.requests.append((method, url, kwargs))
        return self.handler(method, url, kwargs)
