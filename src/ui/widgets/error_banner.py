"""Dismissible error banner shown above the finance views."""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QWidget

from ui.styles import AppStyles


class ErrorBanner(QFrame):
    """Shows the current error message until dismissed.

    Signals:
        dismissed: Emitted when the close button is clicked.
    """

    dismissed = pyqtSignal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setStyleSheet(AppStyles.ERROR_BANNER)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 6, 6, 6)

        self._label = QLabel()
        self._label.setWordWrap(True)
        layout.addWidget(self._label, stretch=1)

        self._close_button = QPushButton("✕")
        self._close_button.setFixedWidth(24)
        self._close_button.setToolTip("Dismiss")
        self._close_button.clicked.connect(self.dismissed.emit)
        layout.addWidget(self._close_button)

        self.setVisible(False)

    def show_error(self, message: str | None) -> None:
        """Show ``message``; hides the banner when it is empty."""
        self._label.setText(message or "")
        self.setVisible(bool(message))

    def message(self) -> str:
        return self._label.text()
