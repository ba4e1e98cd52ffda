"""Tests for the finance view widgets."""

import os

# Run Qt in minimal mode to avoid GUI plugin errors
os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

import pytest
from PyQt6.QtCore import Qt

from models.app import BalancePoint
from models.finance import PaginationDescriptor, Wallet
from services.pagination import PaginationState
from ui.widgets import (
    AdvancedTableView,
    BalanceChart,
    DictTableModel,
    ErrorBanner,
    PaginationBar,
    StatsGrid,
    WalletSidebar,
)
from ui.widgets.wallet_sidebar import SUMMARY_LABEL


def _state(current_page, total_pages, limit=100, rows_per_page=None):
    return PaginationState(
        descriptor=PaginationDescriptor(
            current_page=current_page,
            limit=limit,
            total_count=total_pages * limit,
            total_pages=total_pages,
            has_next=current_page < total_pages,
            has_prev=current_page > 1,
        ),
        rows_per_page=rows_per_page or limit,
        loaded_rows=limit,
        default_limit=limit,
    )


@pytest.fixture
def pagination_bar(qtbot):
    bar = PaginationBar()
    qtbot.addWidget(bar)
    return bar


class TestPaginationBar:
    def test_renders_page_labels(self, pagination_bar):
        pagination_bar.set_state(_state(current_page=5, total_pages=10))

        assert pagination_bar.page_labels() == [
            "1", "...", "3", "4", "5", "6", "7", "...", "10",
        ]
        assert pagination_bar._range_label.text() == "401-500 of 1000"

    def test_prev_and_next_request_neighbouring_pages(self, qtbot, pagination_bar):
        pagination_bar.set_state(_state(current_page=3, total_pages=5))

        with qtbot.waitSignal(pagination_bar.page_requested) as blocker:
            pagination_bar._next_button.click()
        assert blocker.args == [4]

        with qtbot.waitSignal(pagination_bar.page_requested) as blocker:
            pagination_bar._prev_button.click()
        assert blocker.args == [2]

    def test_edges_disable_buttons(self, pagination_bar):
        pagination_bar.set_state(_state(current_page=1, total_pages=3))
        assert pagination_bar._prev_button.isEnabled() is False
        assert pagination_bar._next_button.isEnabled() is True

    def test_numbered_button_requests_page(self, qtbot, pagination_bar):
        pagination_bar.set_state(_state(current_page=1, total_pages=3))
        button = pagination_bar._page_buttons[2]

        with qtbot.waitSignal(pagination_bar.page_requested) as blocker:
            button.click()
        assert blocker.args == [3]

    def test_set_state_does_not_emit_rows_change(self, qtbot, pagination_bar):
        with qtbot.assertNotEmitted(pagination_bar.rows_per_page_changed):
            pagination_bar.set_state(_state(current_page=1, total_pages=2, limit=250))

    def test_user_rows_change_is_emitted(self, qtbot, pagination_bar):
        pagination_bar.set_state(_state(current_page=1, total_pages=2, limit=100))
        combo = pagination_bar._rows_combo

        with qtbot.waitSignal(pagination_bar.rows_per_page_changed) as blocker:
            combo.setCurrentIndex(combo.findData(50))
        assert blocker.args == [50]


class TestErrorBanner:
    def test_show_and_hide(self, qtbot):
        banner = ErrorBanner()
        qtbot.addWidget(banner)
        assert banner.isHidden()

        banner.show_error("Cannot reach the backend")
        assert not banner.isHidden()
        assert banner.message() == "Cannot reach the backend"

        banner.show_error(None)
        assert banner.isHidden()

    def test_dismiss_signal(self, qtbot):
        banner = ErrorBanner()
        qtbot.addWidget(banner)
        banner.show_error("boom")

        with qtbot.waitSignal(banner.dismissed):
            banner._close_button.click()


class TestStatsGrid:
    def test_values_by_key(self, qtbot):
        grid = StatsGrid([("income", "Income"), ("expenses", "Expenses")], columns=2)
        qtbot.addWidget(grid)

        grid.set_value("income", "$10.00", sign=10)
        grid.set_value("expenses", "$4.00")

        assert grid.value("income") == "$10.00"
        assert grid.value("expenses") == "$4.00"


class TestWalletSidebar:
    def test_summary_entry_comes_first(self, qtbot):
        sidebar = WalletSidebar()
        qtbot.addWidget(sidebar)

        with qtbot.assertNotEmitted(sidebar.wallet_selected):
            sidebar.set_wallets(
                [Wallet(id="w1", name="Broker", balance=10.0)], selected_wallet_id="w1"
            )

        assert sidebar._list.item(0).text() == SUMMARY_LABEL
        assert sidebar.selected_wallet_id() == "w1"

    def test_user_selection_is_emitted(self, qtbot):
        sidebar = WalletSidebar()
        qtbot.addWidget(sidebar)
        sidebar.set_wallets([Wallet(id="w1", name="Broker")], selected_wallet_id=None)

        with qtbot.waitSignal(sidebar.wallet_selected) as blocker:
            sidebar._list.setCurrentRow(1)
        assert blocker.args == ["w1"]


class TestTables:
    def test_model_formats_and_sorts(self):
        model = DictTableModel(
            [("name", "Asset"), ("value", "Value")],
            [
                {"name": "B", "value": "$2.00", "_sort_value": 2.0},
                {"name": "A", "value": "$10.00", "_sort_value": 10.0},
                {"name": "C", "value": "N/A", "_sort_value": None},
            ],
        )

        model.sort(1, Qt.SortOrder.AscendingOrder)

        assert [model.row_at(i)["name"] for i in range(3)] == ["B", "A", "C"]
        assert model.data(model.index(0, 1)) == "$2.00"
        assert model.headerData(0, Qt.Orientation.Horizontal) == "Asset"

    def test_view_rows(self, qtbot):
        view = AdvancedTableView()
        qtbot.addWidget(view)
        view.setup([("name", "Asset"), ("count", "Count")])

        view.set_rows([{"name": "AAPL", "count": 1200}])

        assert view.row_count() == 1
        assert view.model().data(view.model().index(0, 1)) == "1,200"


class TestBalanceChart:
    def test_set_points(self, qtbot):
        chart = BalanceChart()
        qtbot.addWidget(chart)
        points = [
            BalancePoint(date="2024-01", balance=100.0, deposits=100.0),
            BalancePoint(date="2024-02", balance=170.0, deposits=20.0, income=50.0),
        ]

        chart.set_points(points, "USD")

        assert chart.points() == points
