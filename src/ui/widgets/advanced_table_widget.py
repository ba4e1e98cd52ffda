"""Table widget with sorting, column show/hide and autofit.

Wraps QTableView with a model built from list[dict] rows. Values are shown
as given; callers format currency and dates before handing rows over, and
may keep the raw value under a ``_sort_<key>`` entry for numeric sorting.
"""

from __future__ import annotations

import logging
from typing import Any

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PyQt6.QtWidgets import QHeaderView, QMenu, QTableView, QWidget

from ui.styles import AppStyles

logger = logging.getLogger(__name__)


class DictTableModel(QAbstractTableModel):
    def __init__(self, columns: list[tuple[str, str]], rows: list[dict[str, Any]]):
        super().__init__()
        self._columns = columns  # list of (key, title)
        self._rows = rows

    def rowCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        return len(self._rows)

    def columnCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        return len(self._columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        key = self._columns[index.column()][0]
        row = self._rows[index.row()]
        val = row.get(key)
        if role in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            if val is None:
                return ""
            if isinstance(val, float):
                return f"{val:,.2f}"
            if isinstance(val, int) and not isinstance(val, bool):
                return f"{val:,}"
            return str(val)
        if role == Qt.ItemDataRole.TextAlignmentRole:
            if isinstance(row.get(f"_sort_{key}", val), (int, float)):
                return int(
                    Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
                )
        return None

    def headerData(  # noqa: N802
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ):
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation == Qt.Orientation.Horizontal:
            return self._columns[section][1]
        return section + 1

    def sort(self, column: int, order: Qt.SortOrder = Qt.SortOrder.AscendingOrder):
        key = self._columns[column][0]
        sort_key = f"_sort_{key}"
        reverse = order == Qt.SortOrder.DescendingOrder

        def value(row: dict[str, Any]) -> Any:
            return row.get(sort_key, row.get(key))

        self.layoutAboutToBeChanged.emit()
        try:
            self._rows.sort(key=lambda r: (value(r) is None, value(r)), reverse=reverse)
        except TypeError:
            # Mixed value types in one column; fall back to text order
            self._rows.sort(key=lambda r: str(value(r) or ""), reverse=reverse)
        self.layoutChanged.emit()

    def set_rows(self, rows: list[dict[str, Any]]):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def row_at(self, i: int) -> dict[str, Any]:
        return self._rows[i]


class AdvancedTableView(QTableView):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setSortingEnabled(True)
        header = self.horizontalHeader()
        if header is not None:
            header.setStretchLastSection(True)
            header.setSectionsMovable(True)
            header.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
            header.customContextMenuRequested.connect(self._on_header_context_menu)
            header.setDefaultSectionSize(110)
            header.setMinimumSectionSize(40)
        self.setSelectionBehavior(QTableView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QTableView.SelectionMode.ExtendedSelection)
        self.setAlternatingRowColors(False)
        self._model: DictTableModel | None = None
        # Compact rows for dense data
        vert_header = self.verticalHeader()
        if vert_header is not None:
            vert_header.setDefaultSectionSize(20)
            vert_header.setMinimumSectionSize(16)
            vert_header.setSectionResizeMode(QHeaderView.ResizeMode.Fixed)
            vert_header.setVisible(False)
        self.setStyleSheet(AppStyles.TABLE)

    def setup(self, columns: list[tuple[str, str]]) -> None:
        self._model = DictTableModel(columns, [])
        self.setModel(self._model)

    def set_rows(self, rows: list[dict[str, Any]]) -> None:
        if self._model is None:
            return
        self._model.set_rows(rows)

    def row_count(self) -> int:
        return self._model.rowCount() if self._model else 0

    def selected_rows(self) -> list[dict[str, Any]]:
        """Rows covered by the current selection, in view order."""
        sel = self.selectionModel()
        if self._model is None or sel is None:
            return []
        rows = sorted({i.row() for i in sel.selectedIndexes()})
        return [self._model.row_at(r) for r in rows]

    def _on_header_context_menu(self, pos) -> None:
        """Column visibility toggles and autofit."""
        if not self._model:
            return
        header = self.horizontalHeader()
        if header is None:
            return
        menu = QMenu(self)

        autofit_action = menu.addAction("Autofit Columns")
        if autofit_action is not None:
            autofit_action.triggered.connect(self._autofit_columns)

        menu.addSeparator()
        for col in range(self._model.columnCount()):
            col_name = (
                self._model.headerData(
                    col, Qt.Orientation.Horizontal, Qt.ItemDataRole.DisplayRole
                )
                or f"Column {col}"
            )
            act = menu.addAction(col_name)
            if act is not None:
                act.setCheckable(True)
                act.setChecked(not self.isColumnHidden(col))
                act.toggled.connect(
                    lambda checked, c=col: self.setColumnHidden(c, not checked)
                )

        menu.exec(header.mapToGlobal(pos))

    def _autofit_columns(self) -> None:
        """Auto-fit all visible columns to their content."""
        for col in range(self._model.columnCount() if self._model else 0):
            if not self.isColumnHidden(col):
                self.resizeColumnToContents(col)
