"""Wallet endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from models.finance import Wallet

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient

logger = logging.getLogger(__name__)


class WalletEndpoints:
    """Handles wallet endpoints.

    Example:
        ```python
        client = FinanceApiClient()
        wallets = await client.wallets.list_wallets()
        wallet = await client.wallets.create_wallet("Brokerage")
        await client.wallets.delete_wallet(wallet.id)
        ```
    """

    def __init__(self, client: FinanceApiClient):
        """Initialize wallet endpoints with the API client.

        Args:
            client: API client instance for HTTP operations
        """
        self._client = client

    async def list_wallets(self) -> list[Wallet]:
        """Get every wallet of the signed-in user.

        The backend answers either with a bare list or with
        ``{"wallets": [...], "count": n}``; both are accepted.

        Returns:
            Wallet summaries with server balances (transactions not loaded)
        """
        data = await self._client.request("GET", "/api/wallets")
        if isinstance(data, dict):
            data = data.get("wallets", [])
        wallets = (
            [self._client.parse(Wallet, w, "/api/wallets") for w in data]
            if isinstance(data, list)
            else []
        )
        logger.debug("Retrieved %d wallets", len(wallets))
        return wallets

    async def create_wallet(self, name: str) -> Wallet:
        """Create a wallet.

        Args:
            name: Display name (already trimmed and non-empty)

        Returns:
            The created wallet
        """
        data = await self._client.request("POST", "/api/wallets", json_body={"name": name})
        return self._client.parse(Wallet, data, "/api/wallets")

    async def delete_wallet(self, wallet_id: str) -> None:
        """Delete a wallet and its transactions."""
        await self._client.request("DELETE", f"/api/wallets/{wallet_id}")
