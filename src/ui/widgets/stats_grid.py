"""Grid of labelled statistic cards."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QFrame, QGridLayout, QLabel, QVBoxLayout, QWidget

from ui.styles import AppStyles


class StatCard(QFrame):
    """A title over a large value, optionally coloured by sign."""

    def __init__(self, title: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setStyleSheet(AppStyles.PANEL_DARK)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(2)

        self._title_label = QLabel(title)
        self._title_label.setStyleSheet(AppStyles.LABEL_CAPTION)
        layout.addWidget(self._title_label)

        self._value_label = QLabel("-")
        self._value_label.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByMouse
        )
        self._value_label.setStyleSheet(AppStyles.LABEL_VALUE)
        layout.addWidget(self._value_label)

    def set_value(self, text: str, sign: float | None = None) -> None:
        """Show ``text``; a ``sign`` colours it green (>= 0) or red (< 0)."""
        self._value_label.setText(text)
        if sign is None:
            self._value_label.setStyleSheet(AppStyles.LABEL_VALUE)
        elif sign < 0:
            self._value_label.setStyleSheet(AppStyles.LABEL_NEGATIVE)
        else:
            self._value_label.setStyleSheet(AppStyles.LABEL_POSITIVE)

    def value(self) -> str:
        return self._value_label.text()


class StatsGrid(QWidget):
    """Cards laid out left to right, wrapping after ``columns`` cards."""

    def __init__(
        self,
        titles: list[tuple[str, str]],
        columns: int = 4,
        parent: QWidget | None = None,
    ) -> None:
        """Create one card per ``(key, title)`` pair."""
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self._cards: dict[str, StatCard] = {}
        for i, (key, title) in enumerate(titles):
            card = StatCard(title)
            layout.addWidget(card, i // columns, i % columns)
            self._cards[key] = card

    def set_value(self, key: str, text: str, sign: float | None = None) -> None:
        self._cards[key].set_value(text, sign)

    def value(self, key: str) -> str:
        return self._cards[key].value()
