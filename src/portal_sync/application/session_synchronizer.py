"""Identity and session synchronization."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from portal_sync.application.error_reporting import extract_error_details
from portal_sync.domain.errors import AuthFailure, BackendError, SyncFailure
from portal_sync.domain.models.auth_session import AuthEvent, AuthSession
from portal_sync.domain.models.identity import Identity
from portal_sync.domain.models.load_status import LoadStatus
from portal_sync.domain.models.unlock_result import UnlockResult

if TYPE_CHECKING:
    from portal_sync.domain.contracts.state_listener import StateListener
    from portal_sync.domain.ports import DatabaseBackend, IdentityProvider

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "*, mcss_config:mcss_configs!mcss_config_id(mcss_api_key)"
AVATAR_BUCKET = "avatars"


@dataclass(frozen=True)
class SessionSynchronizerSettings:
    """Timing and URL settings for the session synchronizer."""

    safety_timeout_seconds: float = 6.0
    password_reset_redirect_url: str = "http://localhost:8000/#/reset-password"


def _extract_credential(profile_row: dict[str, Any]) -> str | None:
    """Pull the remote-control key out of the joined mcss_config relation."""
    relation = profile_row.get("mcss_config")
    if isinstance(relation, list):
        relation = relation[0] if relation else None
    if isinstance(relation, dict):
        return relation.get("mcss_api_key") or None
    return None


class SessionSynchronizer:
    """Owns the identity lifecycle and its load-status state machine.

    Results that arrive after ``close()`` are dropped. A profile sync that
    finishes after the safety timer fired is still applied.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        database: DatabaseBackend,
        settings: SessionSynchronizerSettings | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            identity_provider: Hosted identity service.
            database: Backend holding profiles, unlocks and intel assets.
            settings: Timing settings; defaults are used when omitted.
        """
        self._identity_provider = identity_provider
        self._database = database
        self.settings = settings or SessionSynchronizerSettings()

        self._identity: Identity | None = None
        self._credential: str | None = None
        self._unlocked_intel_ids: list[str] = []
        self._sync_error: str | None = None
        self._status = LoadStatus.IDLE
        self._loading = True

        self._alive = False
        self._sync_in_progress = False
        self._has_finished_initial_load = False
        self._safety_task: asyncio.Task | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._background_tasks: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []

    @property
    def identity(self) -> Identity | None:
        """The signed-in user's identity, or None."""
        return self._identity

    @property
    def credential(self) -> str | None:
        """Remote-control key derived from the user's profile."""
        return self._credential

    @property
    def sync_error(self) -> str | None:
        """Why the last profile sync came back without a profile, if it did."""
        return self._sync_error

    @property
    def unlocked_intel_ids(self) -> tuple[str, ...]:
        """Ids of intel assets the user has unlocked."""
        return tuple(self._unlocked_intel_ids)

    @property
    def status(self) -> LoadStatus:
        """Current load status."""
        return self._status

    @property
    def loading(self) -> bool:
        """Whether a consumer should show a loading indicator."""
        return self._loading

    @property
    def sync_in_progress(self) -> bool:
        """Whether a profile sync is currently running."""
        return self._sync_in_progress

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        """Unregister a callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def initialize(self) -> None:
        """Restore any existing session and hydrate the profile."""
        self._alive = True
        self._unsubscribe = self._identity_provider.subscribe(self._on_session_event)
        self._safety_task = asyncio.create_task(self._run_safety_timer())

        self._set_status(LoadStatus.SESSION)
        try:
            session = await self._identity_provider.get_session()
        except Exception as e:
            details = extract_error_details(e)
            logger.error(f"Session lookup failed: {details.reason} ({e})")
            self._finish_loading(LoadStatus.ERROR)
            return

        if session is not None and self._alive:
            await self.sync_profile(session.user.id, session.user.email, session.user.metadata)
        else:
            self._finish_loading(LoadStatus.READY)

    def close(self) -> None:
        """Tear down timers and subscriptions; later results are dropped."""
        self._alive = False
        if self._safety_task is not None and not self._safety_task.done():
            self._safety_task.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._background_tasks):
            task.cancel()
        logger.info("Session synchronizer closed")

    async def sync_profile(
        self, user_id: str, email: str = "", metadata: dict[str, Any] | None = None
    ) -> None:
        """Fetch the profile row and unlocked assets for `user_id`.

        Single-flight: a call made while another sync runs returns immediately.
        Failures are logged and the state machine still settles on READY.
        """
        if self._sync_in_progress:
            logger.debug(f"Profile sync for {user_id} skipped, another sync is in flight")
            return
        self._sync_in_progress = True

        try:
            self._set_status(LoadStatus.SYNCING)
            logger.debug(f"Syncing profile: {email}")
            profile_result, unlocks_result = await asyncio.gather(
                self._database.select_one("profiles", PROFILE_COLUMNS, {"id": user_id}),
                self._database.select("user_unlocks", "intel_id", {"user_id": user_id}),
                return_exceptions=True,
            )
            if not self._alive:
                return

            if isinstance(unlocks_result, BaseException):
                details = extract_error_details(unlocks_result)
                logger.error(f"Unlock list sync failed: {details.reason} ({unlocks_result})")
            else:
                self._unlocked_intel_ids = [row["intel_id"] for row in unlocks_result]

            try:
                self._apply_profile(user_id, email, metadata, profile_result)
                self._sync_error = None
            except SyncFailure as e:
                logger.error(str(e))
                self._sync_error = str(e)
        finally:
            self._sync_in_progress = False
            self._finish_loading(LoadStatus.READY)

    # Pass-throughs to the identity provider

    async def login(self, email: str, password: str) -> None:
        """Sign in. On success, loading settles once the pushed sync completes."""
        self._set_loading(True)
        try:
            await self._identity_provider.sign_in(email, password)
        except Exception:
            self._set_loading(False)
            raise

    async def signup(self, email: str, password: str, username: str) -> None:
        """Register. On success, loading settles once the pushed sync completes."""
        self._set_loading(True)
        try:
            session = await self._identity_provider.sign_up(
                email, password, {"username": username}
            )
        except Exception:
            self._set_loading(False)
            raise
        if session is None:
            # Confirmation mail pending: no SIGNED_IN event will follow.
            self._set_loading(False)

    async def logout(self) -> None:
        """Sign out and clear the local identity."""
        self._set_loading(True)
        try:
            await self._identity_provider.sign_out()
            self._clear_identity()
        finally:
            self._set_loading(False)

    async def update_profile(self, updates: dict[str, Any]) -> None:
        """Write profile columns through to the backend and patch local state."""
        identity = self._identity
        if identity is None:
            return
        await self._database.update("profiles", updates, {"id": identity.id})
        if self._alive and self._identity is not None:
            self._identity = self._identity.with_updates(updates)
            self._notify()

    async def update_password(self, password: str) -> None:
        """Change the current user's password."""
        await self._identity_provider.update_user(password)

    async def reset_password(self, email: str) -> None:
        """Send a password reset mail that links back to the portal."""
        await self._identity_provider.reset_password_for_email(
            email, self.settings.password_reset_redirect_url
        )

    async def upload_avatar(
        self, filename: str, content: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        """Store an avatar image and point the profile at it. Returns the public URL."""
        if self._identity is None:
            raise AuthFailure("Not signed in")
        extension = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
        path = f"{self._identity.id}/{uuid.uuid4().hex}.{extension}"
        await self._database.upload_file(AVATAR_BUCKET, path, content, content_type)
        public_url = self._database.public_url(AVATAR_BUCKET, path)
        await self.update_profile({"avatar_url": public_url})
        return public_url

    async def verify_password(self, password: str) -> bool:
        """Re-authenticate with `password` to confirm it before a change."""
        if self._identity is None or not self._identity.email:
            return False
        try:
            await self._identity_provider.sign_in(self._identity.email, password)
        except AuthFailure:
            return False
        return True

    # Optimistic patches

    async def mark_banner_as_read(self, banner_id: str) -> None:
        """Acknowledge a single notification."""
        if self._identity is None or banner_id in self._identity.read_banner_ids:
            return
        await self.update_profile({"read_banner_ids": [*self._identity.read_banner_ids, banner_id]})
        await self._record_banner_reads([banner_id])

    async def mark_all_banners_as_read(self, banner_ids: list[str]) -> None:
        """Acknowledge every notification in `banner_ids`."""
        if self._identity is None:
            return
        await self.update_profile({"read_banner_ids": list(banner_ids)})
        await self._record_banner_reads(banner_ids)

    async def add_xp(self, amount: int) -> None:
        """Grant experience points."""
        if self._identity is None:
            return
        await self.update_profile({"experience_points": self._identity.experience_points + amount})

    async def unlock_intel(self, intel_id: str) -> None:
        """Record an unlock; the local list only grows when the insert succeeded."""
        if self._identity is None:
            return
        try:
            await self._database.insert(
                "user_unlocks", {"user_id": self._identity.id, "intel_id": intel_id}
            )
        except BackendError as e:
            logger.warning(f"Unlock of intel {intel_id} rejected: {e}")
            return
        if self._alive and intel_id not in self._unlocked_intel_ids:
            self._unlocked_intel_ids.append(intel_id)
            self._notify()

    async def attempt_unlock_with_code(self, code: str) -> UnlockResult:
        """Look up an intel asset by its unlock code and unlock it."""
        asset = await self._database.select_one("intel_assets", "id, name", {"unlock_code": code})
        if asset is None:
            return UnlockResult(success=False, message="Invalid code")
        if asset["id"] in self._unlocked_intel_ids:
            return UnlockResult(success=True, message="Already granted")
        await self.unlock_intel(asset["id"])
        return UnlockResult(success=True, message=f"Access granted: {asset['name']}")

    # Internals

    async def _record_banner_reads(self, banner_ids: list[str]) -> None:
        if self._identity is None or not banner_ids:
            return
        rows = [{"profile_id": self._identity.id, "banner_id": b} for b in banner_ids]
        try:
            await self._database.upsert("profile_read_banners", rows)
        except BackendError as e:
            logger.warning(f"Could not record banner reads: {e}")

    def _on_session_event(self, event: AuthEvent, session: AuthSession | None) -> None:
        if not self._alive:
            return
        if event == AuthEvent.SIGNED_IN and session is not None:
            user = session.user
            self._spawn(self.sync_profile(user.id, user.email, user.metadata))
        elif event == AuthEvent.SIGNED_OUT:
            self._clear_identity()
            self._finish_loading(LoadStatus.READY)

    def _spawn(self, coroutine: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coroutine)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _run_safety_timer(self) -> None:
        await asyncio.sleep(self.settings.safety_timeout_seconds)
        if not self._has_finished_initial_load:
            logger.warning(
                f"Session hydration exceeded {self.settings.safety_timeout_seconds}s, "
                "finalizing as TIMEOUT"
            )
            self._finish_loading(LoadStatus.TIMEOUT)

    def _apply_profile(
        self,
        user_id: str,
        email: str,
        metadata: dict[str, Any] | None,
        result: dict[str, Any] | BaseException | None,
    ) -> None:
        if isinstance(result, BaseException):
            details = extract_error_details(result)
            raise SyncFailure(f"Profile sync failed: {details.reason} ({result})") from result
        if result is None:
            raise SyncFailure(f"No profile row found for user {user_id}")
        self._identity = Identity.from_profile_row(user_id, email, result, metadata)
        self._credential = _extract_credential(result)

    def _clear_identity(self) -> None:
        if not self._alive:
            return
        self._identity = None
        self._credential = None
        self._unlocked_intel_ids = []
        self._sync_error = None
        self._notify()

    def _set_status(self, status: LoadStatus) -> None:
        if not self._alive:
            return
        self._status = status
        self._notify()

    def _set_loading(self, loading: bool) -> None:
        if not self._alive:
            return
        self._loading = loading
        self._notify()

    def _finish_loading(self, status: LoadStatus = LoadStatus.READY) -> None:
        if not self._alive:
            return
        self._status = status
        self._loading = False
        if not self._has_finished_initial_load:
            self._has_finished_initial_load = True
            logger.info(f"Initial session load finished via {status}")
        else:
            logger.debug(f"Session status updated to {status}")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session state listener failed")
