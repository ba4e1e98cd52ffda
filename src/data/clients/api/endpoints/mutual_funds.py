"""Mutual fund endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from models.finance import MutualFund

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient

logger = logging.getLogger(__name__)


class MutualFundEndpoints:
    """Handles mutual fund endpoints."""

    def __init__(self, client: FinanceApiClient):
        self._client = client

    async def list_funds(self) -> list[MutualFund]:
        """Get tracked mutual funds.

        Accepts a bare list as well as ``{"funds": [...]}`` or ``{"data": [...]}``.
        """
        data = await self._client.request("GET", "/api/v1/mutual_funds")
        if isinstance(data, dict):
            data = data.get("funds", data.get("data", []))
        funds = (
            [self._client.parse(MutualFund, f, "/api/v1/mutual_funds") for f in data]
            if isinstance(data, list)
            else []
        )
        logger.debug("Retrieved %d mutual funds", len(funds))
        return funds

    async def push_value(self, fund_id: str, current_value: float, date: str) -> Any:
        """Record a new current value for a fund.

        Args:
            fund_id: Fund ID
            current_value: Current fund value
            date: ISO date the value applies to

        Returns:
            The backend's response body (None for 204)
        """
        return await self._client.request(
            "POST",
            f"/api/v1/mutual_funds/{fund_id}/values",
            json_body={"current_value": current_value, "date": date},
        )
