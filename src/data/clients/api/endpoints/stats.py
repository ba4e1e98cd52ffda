"""Server-side statistics endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.finance import WalletStats

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient


class StatsEndpoints:
    """Handles the statistics endpoint."""

    def __init__(self, client: FinanceApiClient):
        self._client = client

    async def get_stats(self, wallet_id: str | None = None) -> WalletStats:
        """Get statistics for one wallet, or for all wallets when None."""
        data = await self._client.request(
            "GET", "/api/stats", params={"wallet_id": wallet_id}
        )
        return self._client.parse(WalletStats, data or {}, "/api/stats")
