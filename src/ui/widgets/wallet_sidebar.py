"""Wallet list with add/remove controls.

Public API:
- class WalletSidebar(QWidget)
  - set_wallets(wallets, selected_wallet_id) -> None
  - wallet_selected: pyqtSignal(object) (wallet id, or None for the summary)
  - add_requested: pyqtSignal(str) (wallet name)
  - remove_requested: pyqtSignal(str) (wallet id)
"""

from __future__ import annotations

from collections.abc import Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from models.finance import Wallet
from ui.styles import AppStyles
from utils.formatting import format_currency

SUMMARY_LABEL = "All wallets"


class WalletSidebar(QWidget):
    """Lists wallets with their balance; the first entry selects the summary."""

    wallet_selected = pyqtSignal(object)
    add_requested = pyqtSignal(str)
    remove_requested = pyqtSignal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._updating = False
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        header = QLabel("Wallets")
        header.setStyleSheet(AppStyles.LABEL_HEADER)
        layout.addWidget(header)

        self._list = QListWidget()
        self._list.setStyleSheet(AppStyles.LIST_WIDGET)
        self._list.currentItemChanged.connect(self._on_current_changed)
        layout.addWidget(self._list, stretch=1)

        buttons = QHBoxLayout()
        self._add_button = QPushButton("Add")
        self._add_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        self._add_button.clicked.connect(self._on_add_clicked)
        buttons.addWidget(self._add_button)

        self._remove_button = QPushButton("Delete")
        self._remove_button.setStyleSheet(AppStyles.BUTTON_DANGER)
        self._remove_button.clicked.connect(self._on_remove_clicked)
        self._remove_button.setEnabled(False)
        buttons.addWidget(self._remove_button)
        layout.addLayout(buttons)

    def set_wallets(
        self, wallets: Sequence[Wallet], selected_wallet_id: str | None
    ) -> None:
        """Re-populate the list without emitting selection signals."""
        self._updating = True
        try:
            self._list.clear()
            summary = QListWidgetItem(SUMMARY_LABEL)
            summary.setData(Qt.ItemDataRole.UserRole, None)
            self._list.addItem(summary)
            current = summary

            for wallet in wallets:
                currency = (
                    wallet.transactions[0].currency if wallet.transactions else "USD"
                )
                item = QListWidgetItem(
                    f"{wallet.name}\n{format_currency(wallet.balance, currency)}"
                )
                item.setData(Qt.ItemDataRole.UserRole, wallet.id)
                item.setToolTip(f"{wallet.known_transaction_count:,} transactions")
                self._list.addItem(item)
                if wallet.id == selected_wallet_id:
                    current = item

            self._list.setCurrentItem(current)
            self._remove_button.setEnabled(selected_wallet_id is not None)
        finally:
            self._updating = False

    def selected_wallet_id(self) -> str | None:
        item = self._list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item is not None else None

    def _on_current_changed(self, current: QListWidgetItem | None, _previous) -> None:
        wallet_id = current.data(Qt.ItemDataRole.UserRole) if current else None
        self._remove_button.setEnabled(wallet_id is not None)
        if not self._updating:
            self.wallet_selected.emit(wallet_id)

    def _on_add_clicked(self) -> None:
        name, ok = QInputDialog.getText(self, "Add Wallet", "Wallet name:")
        if ok and name.strip():
            self.add_requested.emit(name.strip())

    def _on_remove_clicked(self) -> None:
        item = self._list.currentItem()
        wallet_id = item.data(Qt.ItemDataRole.UserRole) if item else None
        if wallet_id is None:
            return
        name = item.text().split("\n", 1)[0]
        reply = QMessageBox.question(
            self,
            "Delete Wallet",
            f"Delete wallet '{name}' and all of its transactions?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.remove_requested.emit(wallet_id)
