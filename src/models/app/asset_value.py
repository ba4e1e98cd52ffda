"""User-maintained asset valuation models."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from .rollup import AssetRollup

SYNCABLE_ASSET_TYPES = frozenset({"STOCK", "ETF", "CRYPTO", "MUTUAL_FUND"})


class AssetValue(BaseModel):
    """Current unit price entered by the user for an asset."""

    value: float = Field(..., ge=0, description="Current price per unit")
    last_updated: datetime = Field(..., description="When the value was entered (UTC)")


class AssetHolding(BaseModel):
    """An asset rollup joined with its persisted current value."""

    rollup: AssetRollup
    current_value: AssetValue | None = None

    @computed_field  # type: ignore[misc]
    @property
    def can_sync(self) -> bool:
        """Whether market prices can be fetched for this asset type."""
        return (self.rollup.type or "").upper() in SYNCABLE_ASSET_TYPES

    @computed_field  # type: ignore[misc]
    @property
    def estimated_value(self) -> float | None:
        """Current value times held volume, when both are known."""
        if self.current_value is None or self.rollup.total_volume <= 0:
            return None
        return self.current_value.value * self.rollup.total_volume
