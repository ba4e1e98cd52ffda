"""Monthly balance growth chart built on pyqtgraph."""

from __future__ import annotations

import logging

import pyqtgraph as pg  # type: ignore
from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget

from models.app import BalancePoint
from ui.styles import AppStyles, GraphStyles
from utils.formatting import format_compact, format_currency, format_month

logger = logging.getLogger(__name__)


class CompactAxisItem(pg.AxisItem):
    """Axis implementation that formats ticks with k/m/b abbreviations."""

    def tickStrings(self, values, scale, spacing):  # noqa: N802
        return [format_compact(value) for value in values]


class MonthAxisItem(pg.AxisItem):
    """Bottom axis labelling integer ticks with their ``Mon YYYY`` month."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._months: list[str] = []

    def set_months(self, months: list[str]) -> None:
        self._months = months

    def tickStrings(self, values, scale, spacing):  # noqa: N802
        labels = []
        for value in values:
            index = round(value)
            if abs(value - index) < 1e-6 and 0 <= index < len(self._months):
                labels.append(format_month(self._months[index]))
            else:
                labels.append("")
        return labels


class BalanceChart(QWidget):
    """Line chart of end-of-month running balance with deposit/income series."""

    SERIES = ("Balance", "Deposits", "Income")

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._points: list[BalancePoint] = []
        self._currency = "USD"

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self._plot_widget = pg.PlotWidget()
        self._plot_widget.setBackground(GraphStyles.BACKGROUND)
        self._plot_widget.setAntialiasing(True)
        self._y_axis = CompactAxisItem(orientation="left")
        self._x_axis = MonthAxisItem(orientation="bottom")

        plot_item = self._plot_widget.getPlotItem()
        if plot_item is not None:
            plot_item.setAxisItems({"left": self._y_axis, "bottom": self._x_axis})
            plot_item.setTitle("Balance Growth")
            plot_item.addLegend()
            plot_item.showGrid(x=False, y=True, alpha=GraphStyles.GRID_ALPHA)
            plot_item.setMenuEnabled(False)
        layout.addWidget(self._plot_widget, stretch=1)

        self._summary_label = QLabel("No transactions loaded")
        self._summary_label.setStyleSheet(AppStyles.LABEL_INFO)
        layout.addWidget(self._summary_label)

    def set_points(self, points: list[BalancePoint], currency: str = "USD") -> None:
        """Replot the chart; an empty list clears it."""
        self._points = list(points)
        self._currency = currency
        self._plot_widget.clear()
        self._x_axis.set_months([p.date for p in self._points])

        if not self._points:
            self._summary_label.setText("No transactions loaded")
            return

        xs = list(range(len(self._points)))
        series = {
            "Balance": [p.balance for p in self._points],
            "Deposits": [p.deposits for p in self._points],
            "Income": [p.income for p in self._points],
        }
        for label in self.SERIES:
            color = GraphStyles.COLORS[label]
            width = (
                GraphStyles.BALANCE_LINE_WIDTH
                if label == "Balance"
                else GraphStyles.DEFAULT_LINE_WIDTH
            )
            self._plot_widget.plot(
                xs,
                series[label],
                name=label,
                pen=pg.mkPen(color=color, width=width),
                symbol=GraphStyles.SYMBOLS[label],
                symbolSize=GraphStyles.DEFAULT_SYMBOL_SIZE,
                symbolBrush=color,
                symbolPen=pg.mkPen(color=GraphStyles.SYMBOL_OUTLINE, width=1),
            )

        last = self._points[-1]
        self._summary_label.setText(
            f"Balance {format_month(last.date)}: {format_currency(last.balance, currency)}"
        )
        logger.debug("Plotted %d balance points", len(self._points))

    def points(self) -> list[BalancePoint]:
        return list(self._points)
