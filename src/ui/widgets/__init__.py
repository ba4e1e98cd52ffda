"""UI widgets package."""

from .advanced_table_widget import AdvancedTableView, DictTableModel
from .balance_chart import BalanceChart
from .error_banner import ErrorBanner
from .pagination_bar import PaginationBar
from .stats_grid import StatCard, StatsGrid
from .wallet_sidebar import WalletSidebar

__all__ = [
    "AdvancedTableView",
    "BalanceChart",
    "DictTableModel",
    "ErrorBanner",
    "PaginationBar",
    "StatCard",
    "StatsGrid",
    "WalletSidebar",
]
