"""UI tabs package."""

from .assets_tab import AssetsTab
from .summary_tab import SummaryTab
from .wallet_tab import WalletTab

__all__ = [
    "AssetsTab",
    "SummaryTab",
    "WalletTab",
]
