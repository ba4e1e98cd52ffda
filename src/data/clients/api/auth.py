"""Session state for requests to the finance backend.

The identity provider is external: it hands this app a bearer token and the
signed-in email. The backend additionally expects a legacy ``X-User-ID``
header carrying the ID returned by ``POST /api/users/register``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from models.finance import BackendUser
from utils import global_config
from utils.exceptions import AuthorizationError
from utils.request_guards import OnceGuard

if TYPE_CHECKING:
    from utils.settings_manager import SettingsManager

logger = logging.getLogger(__name__)

RegisterUser = Callable[[str], Awaitable[BackendUser]]


class AuthSession:
    """Bearer token, signed-in email and backend user ID holder.

    ``restore`` registers the signed-in user with the backend at most once
    per session. It is guarded by a ``OnceGuard`` so that concurrent callers
    (main window start-up, a manual refresh) share one registration request.
    Signing out resets the guard.
    """

    def __init__(
        self,
        token: str | None = None,
        email: str | None = None,
        authorization_enabled: bool | None = None,
        allowed_emails: list[str] | None = None,
        settings_manager: SettingsManager | None = None,
        restore_guard: OnceGuard | None = None,
    ):
        """Initialize the session.

        Args:
            token: Bearer token from the identity provider. Falls back to config/env.
            email: Signed-in email. Falls back to config/env.
            authorization_enabled: Enforce the email whitelist. Falls back to config/env.
            allowed_emails: Whitelisted emails. Falls back to config/env.
            settings_manager: Where the backend user ID is remembered between runs.
            restore_guard: Once-only guard for ``restore``.
        """
        auth_config = global_config.auth
        self._token = token if token is not None else auth_config.token
        self._email = email if email is not None else auth_config.email
        self.authorization_enabled = (
            authorization_enabled
            if authorization_enabled is not None
            else auth_config.authorization_enabled
        )
        emails = allowed_emails if allowed_emails is not None else auth_config.allowed_emails
        self._allowed_emails = {e.strip().lower() for e in emails if e.strip()}
        self._settings = settings_manager
        self._restore_guard = restore_guard or OnceGuard()

        self._user_id: str | None = None
        if self._settings is not None:
            stored_email = self._settings.get_session_email()
            if stored_email is None or stored_email == self._email:
                self._user_id = self._settings.get_backend_user_id()

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def email(self) -> str | None:
        return self._email

    @property
    def user_id(self) -> str | None:
        """Backend user ID (sent as ``X-User-ID``)."""
        return self._user_id

    @property
    def is_signed_in(self) -> bool:
        return bool(self._token or self._email)

    def headers(self) -> dict[str, str]:
        """Authentication headers for the next request."""
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if self._user_id:
            headers["X-User-ID"] = self._user_id
        return headers

    def is_authorized(self, email: str | None = None) -> bool:
        """Check ``email`` (default: the signed-in email) against the whitelist.

        Always True when authorization is disabled. Comparison ignores case.
        """
        if not self.authorization_enabled:
            return True
        candidate = email if email is not None else self._email
        if not candidate:
            return False
        return candidate.strip().lower() in self._allowed_emails

    def ensure_authorized(self) -> None:
        """Raise AuthorizationError if the signed-in email is not whitelisted."""
        if not self.is_authorized():
            raise AuthorizationError(
                f"{self._email or 'Anonymous user'} is not authorized to use this app"
            )

    def sign_in(self, token: str | None, email: str | None) -> None:
        """Replace the identity-provider credentials."""
        if email != self._email:
            self._set_user_id(None)
            self._restore_guard.reset()
        self._token = token
        self._email = email
        logger.info("Signed in as %s", email or "<unknown>")

    def sign_out(self) -> None:
        """Forget every credential, including the stored backend user ID."""
        self._token = None
        self._email = None
        self._set_user_id(None)
        self._restore_guard.reset()
        logger.info("Signed out")

    def set_user(self, user: BackendUser) -> None:
        """Remember the backend user returned by registration."""
        self._set_user_id(user.user_id)

    def _set_user_id(self, user_id: str | None) -> None:
        self._user_id = user_id
        if self._settings is not None:
            self._settings.set_backend_user(user_id, self._email)

    async def restore(self, register: RegisterUser) -> str | None:
        """Ensure the backend knows the signed-in user; runs at most once.

        Args:
            register: Coroutine function registering an email with the backend.

        Returns:
            The backend user ID, or None when nobody is signed in.

        Raises:
            AuthorizationError: If the signed-in email is not whitelisted.
        """
        return await self._restore_guard.run(lambda: self._restore(register))

    async def _restore(self, register: RegisterUser) -> str | None:
        self.ensure_authorized()
        if self._user_id:
            logger.debug("Reusing stored backend user id %s", self._user_id)
            return self._user_id
        if not self._email:
            logger.debug("No signed-in email; skipping backend registration")
            return None

        user = await register(self._email)
        self.set_user(user)
        logger.info("Registered backend user %s for %s", user.user_id, self._email)
        return user.user_id
