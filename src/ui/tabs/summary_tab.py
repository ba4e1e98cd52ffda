"""Summary view across all wallets: totals, balance growth and asset rollups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QSplitter, QVBoxLayout, QWidget

from ui.signal_bus import get_signal_bus
from ui.styles import AppStyles
from ui.widgets.advanced_table_widget import AdvancedTableView
from ui.widgets.balance_chart import BalanceChart
from ui.widgets.stats_grid import StatsGrid
from utils.formatting import format_currency

if TYPE_CHECKING:
    from models.app import AssetRollup
    from services.finance_manager import FinanceManager, FinanceState

logger = logging.getLogger(__name__)


class SummaryTab(QWidget):
    """Overall stats, monthly balance chart and the per-asset rollup table."""

    def __init__(self, finance_manager: FinanceManager, parent: QWidget | None = None):
        super().__init__(parent)
        self._signal_bus = get_signal_bus()
        self._manager = finance_manager

        self._columns: list[tuple[str, str]] = [
            ("name", "Asset"),
            ("type", "Type"),
            ("wallets", "Wallets"),
            ("total_volume", "Volume"),
            ("total_deposits", "Deposits"),
            ("total_income", "Income"),
            ("transaction_count", "Transactions"),
            ("currency", "Currency"),
        ]

        self._setup_ui()
        self._connect_signals()
        self.refresh(self._manager.state)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self._stats = StatsGrid(
            [
                ("total_balance", "Total Balance"),
                ("total_transactions", "Transactions"),
                ("deposits", "Deposits"),
                ("income", "Income"),
            ]
        )
        layout.addWidget(self._stats)

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.setChildrenCollapsible(False)

        self._chart = BalanceChart()
        splitter.addWidget(self._chart)

        assets_container = QWidget()
        assets_layout = QVBoxLayout(assets_container)
        assets_layout.setContentsMargins(0, 0, 0, 0)
        header = QLabel("Assets")
        header.setStyleSheet(AppStyles.LABEL_HEADER)
        assets_layout.addWidget(header)
        self._assets_table = AdvancedTableView()
        self._assets_table.setup(self._columns)
        assets_layout.addWidget(self._assets_table)
        splitter.addWidget(assets_container)

        layout.addWidget(splitter, stretch=1)

        self._note_label = QLabel(
            "Asset figures and the chart cover the transaction pages loaded so far."
        )
        self._note_label.setStyleSheet(AppStyles.LABEL_INFO)
        layout.addWidget(self._note_label)

    def _connect_signals(self) -> None:
        self._signal_bus.state_changed.connect(self.refresh)

    def refresh(self, state: FinanceState) -> None:
        """Re-render from the manager's derived views."""
        currency = self._manager.primary_currency()
        overall = self._manager.overall_stats()

        self._stats.set_value(
            "total_balance",
            format_currency(overall.total_balance, currency),
            overall.total_balance,
        )
        self._stats.set_value("total_transactions", f"{overall.total_transactions:,}")
        self._stats.set_value("deposits", format_currency(overall.deposits, currency))
        self._stats.set_value(
            "income", format_currency(overall.income, currency), overall.income
        )

        self._chart.set_points(self._manager.balance_growth(), currency)
        self._assets_table.set_rows(
            [self._rollup_to_row(r) for r in self._manager.assets()]
        )

    def _rollup_to_row(self, rollup: AssetRollup) -> dict[str, Any]:
        currency = rollup.currency
        return {
            "name": rollup.name or "(unnamed)",
            "type": rollup.type or "",
            "wallets": ", ".join(sorted(rollup.wallets)),
            "total_volume": rollup.total_volume,
            "total_deposits": format_currency(rollup.total_deposits, currency),
            "_sort_total_deposits": rollup.total_deposits,
            "total_income": format_currency(rollup.total_income, currency),
            "_sort_total_income": rollup.total_income,
            "transaction_count": rollup.transaction_count,
            "currency": (
                f"{currency} (mixed)" if rollup.has_mixed_currencies else currency
            ),
        }
