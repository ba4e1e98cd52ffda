"""Application/business models (domain layer)."""

from .asset_value import SYNCABLE_ASSET_TYPES, AssetHolding, AssetValue
from .rollup import (
    AssetRollup,
    BalancePoint,
    DepositsAndIncome,
    OverallStats,
    TransactionStats,
)

__all__ = [
    "SYNCABLE_ASSET_TYPES",
    "AssetHolding",
    "AssetRollup",
    "AssetValue",
    "BalancePoint",
    "DepositsAndIncome",
    "OverallStats",
    "TransactionStats",
]
