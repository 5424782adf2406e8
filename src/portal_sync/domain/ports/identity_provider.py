"""Identity provider port."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from portal_sync.domain.models.auth_session import AuthEvent, AuthSession

SessionListener = Callable[[AuthEvent, AuthSession | None], Awaitable[None] | None]


class IdentityProvider(Protocol):
    """Port for the hosted identity service.

    Credential errors are raised as AuthFailure.
    """

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        ...

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthSession | None:
        """Register a new account. Returns None when email confirmation is pending."""
        ...

    async def sign_out(self) -> None:
        """End the current session."""
        ...

    async def get_session(self) -> AuthSession | None:
        """Return the current session, if any."""
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a session-change listener. Returns an unsubscribe callable."""
        ...

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        """Send a password reset mail."""
        ...

    async def update_user(self, password: str) -> None:
        """Change the password of the signed-in user."""
        ...
