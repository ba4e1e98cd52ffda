"""Asset holdings application service.

Joins client-side asset rollups with the current unit prices the user enters
(persisted in the settings file) to estimate portfolio value.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from models.app import AssetHolding, AssetValue
from services.aggregation import get_all_assets
from utils.exceptions import ServiceError, ValidationError

if TYPE_CHECKING:
    from models.finance import Wallet
    from utils.settings_manager import SettingsManager

logger = logging.getLogger(__name__)


def parse_asset_value(value: object) -> float:
    """Parse a user-entered unit price; must be a finite number >= 0."""
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"'{value}' is not a valid number") from None
    if not math.isfinite(parsed) or parsed < 0:
        raise ValidationError("Current value must be a number greater than or equal to 0")
    return parsed


class AssetService:
    """Application service for asset holdings and their current values."""

    def __init__(
        self,
        settings_manager: SettingsManager,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize asset service.

        Args:
            settings_manager: Store for user-entered current values
            clock: Returns the current UTC time (injectable for tests)
        """
        self._settings = settings_manager
        self._clock = clock or (lambda: datetime.now(UTC))

    def list_assets(self, wallets: Iterable[Wallet]) -> list[AssetHolding]:
        """Asset rollups across ``wallets`` joined with stored current values."""
        stored = self._settings.get_all_asset_values()
        holdings = []
        for rollup in get_all_assets(wallets):
            entry = stored.get(rollup.name)
            current = (
                AssetValue(value=entry.value, last_updated=entry.last_updated)
                if entry is not None
                else None
            )
            holdings.append(AssetHolding(rollup=rollup, current_value=current))
        return holdings

    def set_current_value(self, asset_name: str, value: object) -> AssetValue:
        """Store a current unit price for an asset, stamped with the UTC time.

        Raises:
            ValidationError: If the value is not a finite number >= 0.
            ServiceError: If the settings file cannot be written.
        """
        parsed = parse_asset_value(value)
        stamp = self._clock()
        try:
            self._settings.set_asset_value(asset_name, parsed, stamp)
        except OSError as e:
            raise ServiceError(f"Could not save current value for {asset_name}: {e}") from e
        logger.info("Set current value of %s to %s", asset_name, parsed)
        return AssetValue(value=parsed, last_updated=stamp)

    def clear_current_value(self, asset_name: str) -> None:
        self._settings.remove_asset_value(asset_name)

    @staticmethod
    def estimate_portfolio_value(holdings: Iterable[AssetHolding]) -> float:
        """Sum of current value x held volume over priced assets with volume > 0."""
        return sum(
            h.estimated_value for h in holdings if h.estimated_value is not None
        )
