"""Assets view: holdings with user-entered current values and mutual funds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMessageBox,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from models.app import AssetHolding
from models.finance import MutualFund
from ui.signal_bus import get_signal_bus
from ui.styles import AppStyles
from ui.widgets.advanced_table_widget import AdvancedTableView
from utils.exceptions import FinanceManagerError
from utils.formatting import NOT_AVAILABLE, format_currency, format_date, format_number

if TYPE_CHECKING:
    from services.asset_service import AssetService
    from services.finance_manager import FinanceManager, FinanceState
    from services.mutual_fund_service import MutualFundService

logger = logging.getLogger(__name__)


class AssetsTab(QWidget):
    """Asset holdings joined with current values, plus the mutual fund list."""

    def __init__(
        self,
        finance_manager: FinanceManager,
        asset_service: AssetService,
        mutual_fund_service: MutualFundService,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._signal_bus = get_signal_bus()
        self._manager = finance_manager
        self._asset_service = asset_service
        self._fund_service = mutual_fund_service
        self._background_tasks: set[asyncio.Task] = set()
        self._holdings: list[AssetHolding] = []

        self._columns: list[tuple[str, str]] = [
            ("name", "Asset"),
            ("type", "Type"),
            ("total_volume", "Held"),
            ("current_value", "Current Value"),
            ("estimated_value", "Estimated Value"),
            ("last_updated", "Updated"),
            ("can_sync", "Market Sync"),
        ]
        self._fund_columns: list[tuple[str, str]] = [
            ("name", "Fund"),
            ("symbol", "Symbol"),
            ("current_value", "Current Value"),
            ("total_invested", "Invested"),
            ("last_updated", "Updated"),
        ]

        self._setup_ui()
        self._connect_signals()
        self.refresh(self._manager.state)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self._portfolio_label = QLabel("Estimated portfolio value: -")
        self._portfolio_label.setStyleSheet(AppStyles.LABEL_VALUE)
        layout.addWidget(self._portfolio_label)

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.setChildrenCollapsible(False)

        holdings_container = QWidget()
        holdings_layout = QVBoxLayout(holdings_container)
        holdings_layout.setContentsMargins(0, 0, 0, 0)
        self._table = AdvancedTableView()
        self._table.setup(self._columns)
        holdings_layout.addWidget(self._table, stretch=1)

        buttons = QHBoxLayout()
        self._set_value_button = QPushButton("Set Current Value...")
        self._set_value_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        buttons.addWidget(self._set_value_button)
        self._clear_value_button = QPushButton("Clear Value")
        self._clear_value_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        buttons.addWidget(self._clear_value_button)
        buttons.addStretch()
        holdings_layout.addLayout(buttons)
        splitter.addWidget(holdings_container)

        funds_container = QWidget()
        funds_layout = QVBoxLayout(funds_container)
        funds_layout.setContentsMargins(0, 0, 0, 0)
        header = QLabel("Mutual Funds")
        header.setStyleSheet(AppStyles.LABEL_HEADER)
        funds_layout.addWidget(header)
        self._funds_table = AdvancedTableView()
        self._funds_table.setup(self._fund_columns)
        funds_layout.addWidget(self._funds_table, stretch=1)

        fund_buttons = QHBoxLayout()
        self._load_funds_button = QPushButton("Load Funds")
        self._load_funds_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        fund_buttons.addWidget(self._load_funds_button)
        self._push_value_button = QPushButton("Push Value...")
        self._push_value_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        fund_buttons.addWidget(self._push_value_button)
        fund_buttons.addStretch()
        funds_layout.addLayout(fund_buttons)
        splitter.addWidget(funds_container)

        layout.addWidget(splitter, stretch=1)

    def _connect_signals(self) -> None:
        self._signal_bus.state_changed.connect(self.refresh)
        self._signal_bus.asset_value_changed.connect(
            lambda _name, _value: self.refresh(self._manager.state)
        )
        self._set_value_button.clicked.connect(self._on_set_value_clicked)
        self._clear_value_button.clicked.connect(self._on_clear_value_clicked)
        self._load_funds_button.clicked.connect(
            lambda: self._run(self.load_funds())
        )
        self._push_value_button.clicked.connect(self._on_push_value_clicked)

    def _run(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------
    # Holdings
    # ------------------------------------------------------------------

    def refresh(self, state: FinanceState) -> None:
        self._holdings = self._asset_service.list_assets(state.wallets)
        self._table.set_rows([self._holding_to_row(h) for h in self._holdings])

        currency = self._manager.primary_currency()
        total = self._asset_service.estimate_portfolio_value(self._holdings)
        self._portfolio_label.setText(
            f"Estimated portfolio value: {format_currency(total, currency)}"
        )

    @staticmethod
    def _holding_to_row(holding: AssetHolding) -> dict[str, Any]:
        rollup = holding.rollup
        current = holding.current_value
        estimated = holding.estimated_value
        return {
            "name": rollup.name,
            "type": rollup.type or "",
            "total_volume": format_number(rollup.total_volume, 4),
            "_sort_total_volume": rollup.total_volume,
            "current_value": (
                format_currency(current.value, rollup.currency)
                if current
                else NOT_AVAILABLE
            ),
            "_sort_current_value": current.value if current else None,
            "estimated_value": (
                format_currency(estimated, rollup.currency)
                if estimated is not None
                else NOT_AVAILABLE
            ),
            "_sort_estimated_value": estimated,
            "last_updated": (
                current.last_updated.strftime("%Y-%m-%d %H:%M UTC") if current else ""
            ),
            "can_sync": "Yes" if holding.can_sync else "No",
        }

    def _selected_asset_name(self) -> str | None:
        rows = self._table.selected_rows()
        return rows[0]["name"] if rows else None

    def _on_set_value_clicked(self) -> None:
        name = self._selected_asset_name()
        if name is None:
            QMessageBox.information(self, "Set Current Value", "Select an asset first.")
            return
        text, ok = QInputDialog.getText(
            self, "Set Current Value", f"Current value per unit of {name}:"
        )
        if not ok:
            return
        try:
            value = self._asset_service.set_current_value(name, text)
        except FinanceManagerError as e:
            logger.warning("Rejected current value for %s: %s", name, e)
            QMessageBox.warning(self, "Set Current Value", str(e))
            return
        self._signal_bus.asset_value_changed.emit(name, value.value)

    def _on_clear_value_clicked(self) -> None:
        name = self._selected_asset_name()
        if name is None:
            return
        self._asset_service.clear_current_value(name)
        self._signal_bus.asset_value_changed.emit(name, None)

    # ------------------------------------------------------------------
    # Mutual funds
    # ------------------------------------------------------------------

    async def load_funds(self) -> list[MutualFund]:
        try:
            funds = await self._fund_service.list_funds()
        except FinanceManagerError as e:
            logger.error("Loading mutual funds failed: %s", e)
            self._signal_bus.error_occurred.emit(str(e))
            return []
        self._funds_table.set_rows([self._fund_to_row(f) for f in funds])
        return funds

    @staticmethod
    def _fund_to_row(fund: MutualFund) -> dict[str, Any]:
        return {
            "id": fund.id,
            "name": fund.name,
            "symbol": fund.symbol or "",
            "current_value": (
                format_currency(fund.current_value)
                if fund.current_value is not None
                else NOT_AVAILABLE
            ),
            "_sort_current_value": fund.current_value,
            "total_invested": (
                format_currency(fund.total_invested)
                if fund.total_invested is not None
                else NOT_AVAILABLE
            ),
            "_sort_total_invested": fund.total_invested,
            "last_updated": format_date(fund.last_updated),
        }

    def _on_push_value_clicked(self) -> None:
        rows = self._funds_table.selected_rows()
        if not rows:
            QMessageBox.information(self, "Push Value", "Select a fund first.")
            return
        fund = rows[0]
        text, ok = QInputDialog.getText(
            self, "Push Value", f"New current value of {fund['name']}:"
        )
        if ok:
            self._run(self._push_value(fund["id"], text))

    async def _push_value(self, fund_id: str, value: str) -> None:
        try:
            await self._fund_service.push_value(fund_id, value)
        except FinanceManagerError as e:
            logger.error("Pushing value for fund %s failed: %s", fund_id, e)
            self._signal_bus.error_occurred.emit(str(e))
            return
        self._signal_bus.status_message.emit("Fund value updated")
        await self.load_funds()
