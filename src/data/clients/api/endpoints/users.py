"""User registration endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from models.finance import BackendUser

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient

logger = logging.getLogger(__name__)


class UserEndpoints:
    """Handles backend user endpoints."""

    def __init__(self, client: FinanceApiClient):
        self._client = client

    async def register(
        self,
        email: str,
        username: str | None = None,
        oauth_provider: str | None = None,
        oauth_id: str | None = None,
    ) -> BackendUser:
        """Register (or look up) the signed-in user.

        Args:
            email: Email from the identity provider
            username: Display name; defaults to the email's local part
            oauth_provider: Identity provider name (google, github, ...)
            oauth_id: Identity provider's user ID

        Returns:
            The backend user, including the ``user_id`` used for ``X-User-ID``
        """
        payload = {
            "email": email,
            "username": username or email.split("@", 1)[0],
            "oauth_provider": oauth_provider,
            "oauth_id": oauth_id,
        }
        data = await self._client.request(
            "POST",
            "/api/users/register",
            json_body={k: v for k, v in payload.items() if v is not None},
        )
        user = self._client.parse(BackendUser, data, "/api/users/register")
        logger.debug("Registered backend user %s", user.user_id)
        return user
