"""Finance data models (domain layer)."""

from .app import (
    AssetHolding,
    AssetRollup,
    AssetValue,
    BalancePoint,
    DepositsAndIncome,
    OverallStats,
    TransactionStats,
)
from .finance import (
    BackendUser,
    CurrencyDetection,
    FailedTransaction,
    MutualFund,
    PaginationDescriptor,
    Transaction,
    TransactionPage,
    UploadResult,
    Wallet,
    WalletStats,
)

__all__ = [
    "AssetHolding",
    "AssetRollup",
    "AssetValue",
    "BackendUser",
    "BalancePoint",
    "CurrencyDetection",
    "DepositsAndIncome",
    "FailedTransaction",
    "MutualFund",
    "OverallStats",
    "PaginationDescriptor",
    "Transaction",
    "TransactionPage",
    "TransactionStats",
    "UploadResult",
    "Wallet",
    "WalletStats",
]
