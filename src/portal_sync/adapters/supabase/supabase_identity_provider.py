"""GoTrue-backed implementation of the IdentityProvider port."""

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from portal_sync.adapters.supabase.constants import (
    AUTH_REJECTION_STATUSES,
    LOGOUT_PATH,
    RECOVER_PATH,
    SIGNUP_PATH,
    TOKEN_PATH,
    USER_PATH,
)
from portal_sync.adapters.supabase.http_client import SupabaseHttpClient
from portal_sync.domain.errors import AuthFailure, BackendError
from portal_sync.domain.models.auth_session import AuthEvent, AuthSession, AuthUser
from portal_sync.domain.ports.identity_provider import IdentityProvider, SessionListener

logger = logging.getLogger(__name__)


def parse_session(body: Any) -> AuthSession | None:
    """Build an AuthSession from a GoTrue token response; None if it carries no token."""
    if not isinstance(body, dict) or not body.get("access_token"):
        return None
    user = body.get("user") or {}
    return AuthSession(
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        expires_in=body.get("expires_in"),
        user=AuthUser(
            id=str(user.get("id", "")),
            email=user.get("email") or "",
            metadata=dict(user.get("user_metadata") or {}),
        ),
    )


class SupabaseIdentityProvider(IdentityProvider):
    """Password sign-in against GoTrue, with push notification of session changes.

    A refresh token, when given, is exchanged for a session on the first
    ``get_session()`` call.
    """

    def __init__(self, client: SupabaseHttpClient, refresh_token: str | None = None) -> None:
        self._client = client
        self._refresh_token = refresh_token
        self._session: AuthSession | None = None
        self._listeners: list[SessionListener] = []
        self._tasks: set[asyncio.Task] = set()

    async def _auth_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            _, body = await self._client.request(method, path, params=params, json=json)
        except BackendError as e:
            if e.status_code in AUTH_REJECTION_STATUSES:
                raise AuthFailure(e.message) from e
            raise
        return body

    def _set_session(self, session: AuthSession | None) -> None:
        self._session = session
        self._client.access_token = session.access_token if session else None
        self._refresh_token = session.refresh_token if session else None

    def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event, session)
            except Exception:
                logger.exception(f"Session listener failed on {event}")
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        body = await self._auth_request(
            "POST",
            TOKEN_PATH,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = parse_session(body)
        if session is None:
            raise AuthFailure("Sign-in returned no session")
        self._set_session(session)
        logger.info(f"Signed in as {session.user.email}")
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthSession | None:
        body = await self._auth_request(
            "POST",
            SIGNUP_PATH,
            json={"email": email, "password": password, "data": metadata or {}},
        )
        session = parse_session(body)
        if session is None:
            logger.info(f"Sign-up for {email} awaits email confirmation")
            return None
        self._set_session(session)
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        if self._session is not None:
            try:
                await self._auth_request("POST", LOGOUT_PATH)
            except (AuthFailure, BackendError) as e:
                # The local session is dropped either way.
                logger.warning(f"Remote sign-out failed: {e}")
        self._set_session(None)
        self._emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> AuthSession | None:
        if self._session is None and self._refresh_token:
            body = await self._auth_request(
                "POST",
                TOKEN_PATH,
                params={"grant_type": "refresh_token"},
                json={"refresh_token": self._refresh_token},
            )
            session = parse_session(body)
            self._set_session(session)
            if session is not None:
                logger.info(f"Restored session for {session.user.email}")
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await self._auth_request(
            "POST", RECOVER_PATH, params={"redirect_to": redirect_to}, json={"email": email}
        )

    async def update_user(self, password: str) -> None:
        if self._session is None:
            raise AuthFailure("Not signed in")
        await self._auth_request("PUT", USER_PATH, json={"password": password})
        self._emit(AuthEvent.USER_UPDATED, self._session)
