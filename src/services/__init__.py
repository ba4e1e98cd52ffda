"""Unified service layer for Finance Manager.

Domain-oriented submodules:
    aggregation: pure stats, asset rollup and balance growth functions
    asset_service: asset holdings joined with user-entered current values
    finance_manager: wallet/page/upload orchestrator behind the views
    mutual_fund_service: mutual fund listing and value updates
    pagination: transaction table pagination state
    wallet_service: validated wallet, transaction and upload operations

"""

from .asset_service import AssetService
from .finance_manager import FinanceManager, FinanceState
from .mutual_fund_service import MutualFundService
from .pagination import PaginationState
from .wallet_service import WalletService

__all__ = [
    "AssetService",
    "FinanceManager",
    "FinanceState",
    "MutualFundService",
    "PaginationState",
    "WalletService",
]
