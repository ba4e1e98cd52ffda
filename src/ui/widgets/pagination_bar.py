"""Pagination controls for the wallet transaction table.

Public API:
- class PaginationBar(QWidget)
  - set_state(state: PaginationState) -> None
  - page_requested: pyqtSignal(int) (1-based page)
  - rows_per_page_changed: pyqtSignal(int)

The bar renders whatever ``PaginationState`` it is given. It never changes
pages itself; it emits requests and waits for the next state.
"""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QWidget,
)

from services.pagination import ELLIPSIS, PaginationState
from ui.styles import AppStyles

ROWS_PER_PAGE_OPTIONS = (50, 100, 250, 500, 1000)


class PaginationBar(QWidget):
    """Previous/next buttons, numbered pages, range label and page size.

    Signals:
        page_requested: Emitted with the 1-based page the user picked.
        rows_per_page_changed: Emitted with the new page size.
    """

    page_requested = pyqtSignal(int)
    rows_per_page_changed = pyqtSignal(int)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._state = PaginationState()
        self._page_buttons: list[QPushButton] = []
        self._updating = False
        self._setup_ui()
        self.set_state(self._state)

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 4, 0, 4)
        layout.setSpacing(4)

        self._range_label = QLabel("0 of 0")
        self._range_label.setStyleSheet(AppStyles.LABEL_INFO)
        layout.addWidget(self._range_label)
        layout.addStretch()

        self._prev_button = QPushButton("‹ Prev")
        self._prev_button.setStyleSheet(AppStyles.BUTTON_SMALL)
        self._prev_button.clicked.connect(self._on_prev_clicked)
        layout.addWidget(self._prev_button)

        self._pages_layout = QHBoxLayout()
        self._pages_layout.setSpacing(2)
        layout.addLayout(self._pages_layout)

        self._next_button = QPushButton("Next ›")
        self._next_button.setStyleSheet(AppStyles.BUTTON_SMALL)
        self._next_button.clicked.connect(self._on_next_clicked)
        layout.addWidget(self._next_button)

        layout.addSpacing(12)
        layout.addWidget(QLabel("Rows per page:"))
        self._rows_combo = QComboBox()
        self._rows_combo.setStyleSheet(AppStyles.COMBOBOX)
        for option in ROWS_PER_PAGE_OPTIONS:
            self._rows_combo.addItem(str(option), option)
        self._rows_combo.currentIndexChanged.connect(self._on_rows_changed)
        layout.addWidget(self._rows_combo)

    @property
    def state(self) -> PaginationState:
        return self._state

    def set_state(self, state: PaginationState) -> None:
        """Re-render the controls from a pagination snapshot."""
        self._state = state
        self._range_label.setText(state.range_label())
        self._prev_button.setEnabled(state.can_go_prev)
        self._next_button.setEnabled(state.can_go_next)
        self._rebuild_page_buttons()
        self._sync_rows_combo(state.rows_per_page)

    def page_labels(self) -> list[str]:
        """Text of the numbered page buttons, ellipses included."""
        return [button.text() for button in self._page_buttons]

    def _rebuild_page_buttons(self) -> None:
        for button in self._page_buttons:
            self._pages_layout.removeWidget(button)
            button.deleteLater()
        self._page_buttons = []

        current = self._state.safe_page + 1
        for entry in self._state.page_numbers():
            button = QPushButton(str(entry))
            button.setStyleSheet(AppStyles.BUTTON_SMALL)
            if entry == ELLIPSIS:
                button.setEnabled(False)
            else:
                button.setCheckable(True)
                button.setChecked(entry == current)
                button.clicked.connect(
                    lambda _checked=False, page=entry: self._request_page(page)
                )
            self._pages_layout.addWidget(button)
            self._page_buttons.append(button)

    def _sync_rows_combo(self, rows_per_page: int) -> None:
        self._updating = True
        try:
            index = self._rows_combo.findData(rows_per_page)
            if index < 0:
                self._rows_combo.addItem(str(rows_per_page), rows_per_page)
                index = self._rows_combo.count() - 1
            self._rows_combo.setCurrentIndex(index)
        finally:
            self._updating = False

    def _request_page(self, page: int) -> None:
        if page != self._state.safe_page + 1:
            self.page_requested.emit(page)
        else:
            # Keep the current page button checked
            self._rebuild_page_buttons()

    def _on_prev_clicked(self) -> None:
        if self._state.can_go_prev:
            self.page_requested.emit(self._state.safe_page)

    def _on_next_clicked(self) -> None:
        if self._state.can_go_next:
            self.page_requested.emit(self._state.safe_page + 2)

    def _on_rows_changed(self, index: int) -> None:
        if self._updating or index < 0:
            return
        limit = self._rows_combo.itemData(index)
        if limit and limit != self._state.rows_per_page:
            self.rows_per_page_changed.emit(int(limit))
