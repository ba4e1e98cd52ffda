"""Finance backend endpoint namespaces."""

from .logs import LogEndpoints
from .mutual_funds import MutualFundEndpoints
from .stats import StatsEndpoints
from .transactions import TransactionEndpoints
from .users import UserEndpoints
from .wallets import WalletEndpoints

__all__ = [
    "LogEndpoints",
    "MutualFundEndpoints",
    "StatsEndpoints",
    "TransactionEndpoints",
    "UserEndpoints",
    "WalletEndpoints",
]
