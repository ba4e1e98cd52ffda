"""Backend finance data models (domain layer)."""

from .account import BackendUser, MutualFund, WalletStats
from .pagination import PaginationDescriptor, TransactionPage
from .transaction import DEFAULT_CURRENCY, Transaction
from .upload import CurrencyDetection, FailedTransaction, UploadResult
from .wallet import Wallet

__all__ = [
    "DEFAULT_CURRENCY",
    "BackendUser",
    "CurrencyDetection",
    "FailedTransaction",
    "MutualFund",
    "PaginationDescriptor",
    "Transaction",
    "TransactionPage",
    "UploadResult",
    "Wallet",
    "WalletStats",
]
