"""Wallet detail view: stats, upload bar, paged transactions and failed rows."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from models.finance import FailedTransaction, Transaction
from ui.signal_bus import get_signal_bus
from ui.styles import AppStyles
from ui.widgets.advanced_table_widget import AdvancedTableView
from ui.widgets.pagination_bar import PaginationBar
from ui.widgets.stats_grid import StatsGrid
from utils.formatting import format_currency, format_date, format_number

if TYPE_CHECKING:
    from services.finance_manager import FinanceManager, FinanceState

logger = logging.getLogger(__name__)

UPLOAD_FILE_FILTER = "Transaction files (*.csv *.xls *.xlsx);;All files (*)"


class WalletTab(QWidget):
    """Detail view of the selected wallet."""

    def __init__(self, finance_manager: FinanceManager, parent: QWidget | None = None):
        super().__init__(parent)
        self._signal_bus = get_signal_bus()
        self._manager = finance_manager
        self._background_tasks: set[asyncio.Task] = set()
        self._upload_path: Path | None = None

        self._columns: list[tuple[str, str]] = [
            ("date", "Date"),
            ("asset_name", "Asset"),
            ("asset_type", "Asset Type"),
            ("transaction_type", "Type"),
            ("volume", "Volume"),
            ("item_price", "Price"),
            ("transaction_amount", "Amount"),
            ("fee", "Fee"),
            ("currency", "Currency"),
        ]
        self._error_columns: list[tuple[str, str]] = [
            ("row_number", "Row"),
            ("error", "Error"),
            ("data", "Data"),
        ]

        self._setup_ui()
        self._connect_signals()
        self.refresh(self._manager.state)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self._title_label = QLabel("No wallet selected")
        self._title_label.setStyleSheet(AppStyles.LABEL_HEADER)
        layout.addWidget(self._title_label)

        self._stats = StatsGrid(
            [
                ("balance", "Balance"),
                ("income", "Income (page)"),
                ("expenses", "Expenses (page)"),
                ("net", "Net (page)"),
            ]
        )
        layout.addWidget(self._stats)

        # Upload bar
        upload_layout = QHBoxLayout()
        self._choose_button = QPushButton("Choose File...")
        self._choose_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        upload_layout.addWidget(self._choose_button)

        self._file_label = QLabel("No file chosen")
        self._file_label.setStyleSheet(AppStyles.LABEL_INFO)
        upload_layout.addWidget(self._file_label, stretch=1)

        upload_layout.addWidget(QLabel("Currency:"))
        self._currency_edit = QLineEdit()
        self._currency_edit.setPlaceholderText("auto")
        self._currency_edit.setMaxLength(3)
        self._currency_edit.setFixedWidth(60)
        self._currency_edit.setStyleSheet(AppStyles.LINE_EDIT)
        upload_layout.addWidget(self._currency_edit)

        self._detect_button = QPushButton("Detect")
        self._detect_button.setStyleSheet(AppStyles.BUTTON_SMALL)
        upload_layout.addWidget(self._detect_button)

        self._upload_button = QPushButton("Upload")
        self._upload_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        upload_layout.addWidget(self._upload_button)

        self._refresh_button = QPushButton("Refresh")
        self._refresh_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        upload_layout.addWidget(self._refresh_button)
        layout.addLayout(upload_layout)

        self._upload_message = QLabel("")
        self._upload_message.setStyleSheet(AppStyles.LABEL_INFO)
        self._upload_message.setVisible(False)
        layout.addWidget(self._upload_message)

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.setChildrenCollapsible(False)

        transactions_container = QWidget()
        tx_layout = QVBoxLayout(transactions_container)
        tx_layout.setContentsMargins(0, 0, 0, 0)
        self._table = AdvancedTableView()
        self._table.setup(self._columns)
        tx_layout.addWidget(self._table, stretch=1)
        self._pagination = PaginationBar()
        tx_layout.addWidget(self._pagination)
        splitter.addWidget(transactions_container)

        self._errors_container = QWidget()
        errors_layout = QVBoxLayout(self._errors_container)
        errors_layout.setContentsMargins(0, 0, 0, 0)
        self._errors_header = QLabel("Failed rows")
        self._errors_header.setStyleSheet(AppStyles.LABEL_HEADER)
        errors_layout.addWidget(self._errors_header)
        self._errors_table = AdvancedTableView()
        self._errors_table.setup(self._error_columns)
        errors_layout.addWidget(self._errors_table)
        splitter.addWidget(self._errors_container)
        self._errors_container.setVisible(False)

        layout.addWidget(splitter, stretch=1)

    def _connect_signals(self) -> None:
        self._signal_bus.state_changed.connect(self.refresh)
        self._choose_button.clicked.connect(self._on_choose_clicked)
        self._detect_button.clicked.connect(self._on_detect_clicked)
        self._upload_button.clicked.connect(self._on_upload_clicked)
        self._refresh_button.clicked.connect(
            lambda: self._run(self._manager.refresh())
        )
        self._pagination.page_requested.connect(
            lambda page: self._run(self._manager.change_page(page))
        )
        self._pagination.rows_per_page_changed.connect(
            lambda limit: self._run(self._manager.change_rows_per_page(limit))
        )

    def _run(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def refresh(self, state: FinanceState) -> None:
        """Re-render from a finance state snapshot."""
        wallet = state.selected_wallet
        busy = state.loading or state.upload_loading
        self._upload_button.setEnabled(
            wallet is not None and self._upload_path is not None and not busy
        )
        self._detect_button.setEnabled(self._upload_path is not None and not busy)
        self._upload_button.setText("Uploading..." if state.upload_loading else "Upload")

        self._upload_message.setText(state.upload_message or "")
        self._upload_message.setVisible(bool(state.upload_message))

        self._render_errors(state.error_transactions)
        self._pagination.set_state(state.pagination)

        if wallet is None:
            self._title_label.setText("No wallet selected")
            self._table.set_rows([])
            return

        currency = self._manager.primary_currency()
        if wallet.transactions:
            currency = wallet.transactions[0].currency
        self._title_label.setText(wallet.name)

        stats = self._manager.selected_wallet_stats()
        self._stats.set_value(
            "balance", format_currency(wallet.balance, currency), wallet.balance
        )
        if stats is not None:
            self._stats.set_value("income", format_currency(stats.income, currency))
            self._stats.set_value("expenses", format_currency(stats.expenses, currency))
            self._stats.set_value("net", format_currency(stats.net, currency), stats.net)

        self._table.set_rows([self._tx_to_row(tx) for tx in wallet.transactions])

    def _render_errors(self, rows: tuple[FailedTransaction, ...]) -> None:
        self._errors_container.setVisible(bool(rows))
        self._errors_header.setText(f"Failed rows ({len(rows)})")
        self._errors_table.set_rows([self._error_to_row(row) for row in rows])

    @staticmethod
    def _tx_to_row(tx: Transaction) -> dict[str, Any]:
        return {
            "date": format_date(tx.date),
            "_sort_date": tx.date,
            "asset_name": tx.asset_name,
            "asset_type": tx.asset_type or "",
            "transaction_type": tx.normalized_type,
            "volume": format_number(tx.volume, 4),
            "_sort_volume": tx.volume,
            "item_price": format_currency(tx.item_price, tx.currency),
            "_sort_item_price": tx.item_price,
            "transaction_amount": format_currency(tx.transaction_amount, tx.currency),
            "_sort_transaction_amount": tx.transaction_amount,
            "fee": format_currency(tx.fee, tx.currency),
            "_sort_fee": tx.fee,
            "currency": tx.currency,
        }

    @staticmethod
    def _error_to_row(row: FailedTransaction) -> dict[str, Any]:
        data = row.data
        if isinstance(data, dict):
            data = ", ".join(f"{k}={v}" for k, v in data.items())
        return {
            "row_number": row.row_number,
            "error": row.error,
            "data": "" if data is None else str(data),
        }

    # ------------------------------------------------------------------
    # Upload actions
    # ------------------------------------------------------------------

    def _on_choose_clicked(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Choose transaction file", "", UPLOAD_FILE_FILTER
        )
        if path:
            self.set_upload_file(Path(path))

    def set_upload_file(self, path: Path | None) -> None:
        self._upload_path = path
        self._file_label.setText(path.name if path else "No file chosen")
        self.refresh(self._manager.state)

    def _on_detect_clicked(self) -> None:
        if self._upload_path is not None:
            self._run(self._detect(self._upload_path))

    async def _detect(self, path: Path) -> None:
        currency = await self._manager.detect_currency(path)
        if currency:
            self._currency_edit.setText(currency)
            self._signal_bus.status_message.emit(f"Detected currency {currency}")

    def _on_upload_clicked(self) -> None:
        if self._upload_path is None:
            return
        logger.debug("Uploading %s", self._upload_path)
        self._run(self._upload(self._upload_path, self._currency_edit.text()))

    async def _upload(self, path: Path, currency: str) -> None:
        self._signal_bus.upload_started.emit(path.name)
        result = await self._manager.upload_file(
            self._manager.state.selected_wallet_id, path, currency or None
        )
        if result is not None:
            self._signal_bus.upload_completed.emit(result)
            self.set_upload_file(None)
