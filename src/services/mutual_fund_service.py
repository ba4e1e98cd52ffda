"""Mutual fund application service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from models.finance import MutualFund
from services.asset_service import parse_asset_value

if TYPE_CHECKING:
    from data.clients import FinanceApiClient

logger = logging.getLogger(__name__)


class MutualFundService:
    """Lists tracked funds and records new current values."""

    def __init__(
        self,
        api_client: FinanceApiClient,
        clock: Callable[[], datetime] | None = None,
    ):
        self._api = api_client
        self._clock = clock or (lambda: datetime.now(UTC))

    async def list_funds(self) -> list[MutualFund]:
        return await self._api.mutual_funds.list_funds()

    async def push_value(self, fund_id: str, value: object) -> Any:
        """Validate ``value`` and post it as the fund's current value.

        Raises:
            ValidationError: If ``value`` is not a finite number >= 0.
        """
        current_value = parse_asset_value(value)
        result = await self._api.mutual_funds.push_value(
            fund_id, current_value, self._clock().isoformat()
        )
        logger.info("Pushed value %s for fund %s", current_value, fund_id)
        return result
