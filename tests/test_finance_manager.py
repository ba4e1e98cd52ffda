"""Tests for the FinanceManager orchestrator.

The wallet service is replaced by AsyncMocks so the tests control response
ordering and failures without a backend. Malformed payloads go through the
real API client over ``httpx.MockTransport``.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from data.clients import AuthSession, FinanceApiClient
from models.finance import (
    FailedTransaction,
    TransactionPage,
    UploadResult,
    Wallet,
)
from services.finance_manager import FinanceManager, FinanceState
from services.wallet_service import SELECT_WALLET_FIRST, WalletService
from utils.exceptions import ApiConnectionError, ApiError, ValidationError


def _page(transactions, page=1, limit=100, total_count=None, total_pages=1):
    count = len(transactions) if total_count is None else total_count
    return TransactionPage(
        transactions=transactions,
        total_count=count,
        total_pages=total_pages,
        page=page,
        limit=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


@pytest.fixture
def wallets():
    return [
        Wallet(id="w1", name="Broker", balance=1000.0, total_transaction_count=3),
        Wallet(id="w2", name="Savings", balance=250.0),
    ]


@pytest.fixture
def wallet_service(wallets):
    service = Mock()
    service.list_wallets = AsyncMock(return_value=list(wallets))
    service.create_wallet = AsyncMock()
    service.delete_wallet = AsyncMock(return_value=None)
    service.get_transaction_page = AsyncMock(return_value=_page([]))
    service.get_transaction_errors = AsyncMock(return_value=[])
    service.upload_transactions = AsyncMock()
    service.detect_currency = AsyncMock()
    return service


@pytest.fixture
def settings():
    settings = Mock()
    settings.get_rows_per_page = Mock(return_value=None)
    settings.set_rows_per_page = Mock()
    settings.get_last_wallet_id = Mock(return_value=None)
    settings.set_last_wallet_id = Mock()
    return settings


@pytest.fixture
def manager(wallet_service, settings):
    return FinanceManager(wallet_service, settings, default_page_limit=100)


class TestStateAndListeners:
    """Snapshots and subscription."""

    def test_initial_state(self, manager):
        state = manager.state
        assert isinstance(state, FinanceState)
        assert state.wallets == ()
        assert state.selected_wallet_id is None
        assert state.pagination.rows_per_page == 100
        assert state.error is None

    def test_stored_rows_per_page_is_used(self, wallet_service, settings):
        settings.get_rows_per_page.return_value = 250
        manager = FinanceManager(wallet_service, settings)
        assert manager.state.pagination.rows_per_page == 250

    @pytest.mark.asyncio
    async def test_listeners_receive_snapshots(self, manager):
        seen = []
        unsubscribe = manager.subscribe(seen.append)

        await manager.load_wallets()
        unsubscribe()
        count = len(seen)
        manager.dismiss_error()

        assert count > 0
        assert len(seen) == count
        assert seen[-1].wallets == manager.state.wallets

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_updates(self, manager):
        manager.subscribe(Mock(side_effect=RuntimeError("boom")))
        await manager.load_wallets()
        assert len(manager.state.wallets) == 2


class TestLoadWallets:
    """Wallet list loading."""

    @pytest.mark.asyncio
    async def test_loads_wallets(self, manager):
        assert await manager.load_wallets() is True
        assert [w.id for w in manager.state.wallets] == ["w1", "w2"]
        assert manager.state.loading is False

    @pytest.mark.asyncio
    async def test_error_sets_banner_and_keeps_state(self, manager, wallet_service):
        await manager.load_wallets()
        wallet_service.list_wallets.side_effect = ApiConnectionError("backend down")

        assert await manager.load_wallets() is False

        assert manager.state.error == "backend down"
        assert len(manager.state.wallets) == 2
        assert manager.state.loading is False

    @pytest.mark.asyncio
    async def test_reload_keeps_loaded_page(self, manager, wallet_service, make_transaction):
        await manager.load_wallets()
        wallet_service.get_transaction_page.return_value = _page([make_transaction()])
        await manager.select_wallet("w1")

        await manager.load_wallets()

        assert len(manager.state.selected_wallet.transactions) == 1

    @pytest.mark.asyncio
    async def test_selection_cleared_when_wallet_disappears(
        self, manager, wallet_service, wallets
    ):
        await manager.load_wallets()
        await manager.select_wallet("w2")
        wallet_service.list_wallets.return_value = [wallets[0]]

        await manager.load_wallets()

        assert manager.state.selected_wallet_id is None

    @pytest.mark.asyncio
    async def test_stale_wallet_list_is_dropped(self, manager, wallet_service, wallets):
        release_first = asyncio.Event()
        calls = 0

        async def list_wallets():
            nonlocal calls
            calls += 1
            if calls == 1:
                await release_first.wait()
                return [wallets[0]]
            return list(wallets)

        wallet_service.list_wallets.side_effect = list_wallets

        first = asyncio.ensure_future(manager.load_wallets())
        await asyncio.sleep(0)
        assert await manager.load_wallets() is True
        release_first.set()

        assert await first is False
        assert len(manager.state.wallets) == 2


class TestInitialize:
    @pytest.mark.asyncio
    async def test_restores_session_then_reselects_last_wallet(
        self, manager, settings, wallet_service
    ):
        settings.get_last_wallet_id.return_value = "w2"
        restore = AsyncMock(return_value="user-1")

        await manager.initialize(restore_session=restore)

        restore.assert_awaited_once()
        assert manager.state.selected_wallet_id == "w2"
        wallet_service.get_transaction_page.assert_awaited_with("w2", page=1, limit=100)

    @pytest.mark.asyncio
    async def test_unknown_last_wallet_is_ignored(self, manager, settings):
        settings.get_last_wallet_id.return_value = "gone"
        await manager.initialize()
        assert manager.state.selected_wallet_id is None

    @pytest.mark.asyncio
    async def test_failed_restore_stops_loading(self, manager, wallet_service):
        restore = AsyncMock(side_effect=ApiError(403, "Forbidden"))

        await manager.initialize(restore_session=restore)

        assert manager.state.error == "Forbidden"
        wallet_service.list_wallets.assert_not_awaited()


class TestWalletCrud:
    @pytest.mark.asyncio
    async def test_add_wallet_appends(self, manager, wallet_service):
        await manager.load_wallets()
        wallet_service.create_wallet.return_value = Wallet(id="w3", name="Crypto")

        wallet = await manager.add_wallet("  Crypto ")

        assert wallet.id == "w3"
        assert [w.id for w in manager.state.wallets] == ["w1", "w2", "w3"]
        wallet_service.create_wallet.assert_awaited_once_with("  Crypto ")

    @pytest.mark.asyncio
    async def test_add_wallet_validation_error_sets_banner(self, manager, wallet_service):
        wallet_service.create_wallet.side_effect = ValidationError(
            "Wallet name cannot be empty"
        )

        assert await manager.add_wallet("   ") is None
        assert manager.state.error == "Wallet name cannot be empty"

    @pytest.mark.asyncio
    async def test_remove_selected_wallet_clears_selection(self, manager, settings):
        await manager.load_wallets()
        await manager.select_wallet("w1")

        assert await manager.remove_wallet("w1") is True

        assert [w.id for w in manager.state.wallets] == ["w2"]
        assert manager.state.selected_wallet_id is None
        settings.set_last_wallet_id.assert_called_with(None)

    @pytest.mark.asyncio
    async def test_remove_failure_keeps_wallet(self, manager, wallet_service):
        await manager.load_wallets()
        wallet_service.delete_wallet.side_effect = ApiError(404, "Wallet not found")

        assert await manager.remove_wallet("w1") is False

        assert len(manager.state.wallets) == 2
        assert manager.state.error == "Wallet not found"


class TestSelectionAndPaging:
    """Selecting wallets and moving through pages."""

    @pytest.mark.asyncio
    async def test_select_loads_first_page_and_errors(
        self, manager, wallet_service, settings, make_transaction
    ):
        await manager.load_wallets()
        rows = [make_transaction(transaction_amount=-40.0), make_transaction(transaction_amount=15.0)]
        wallet_service.get_transaction_page.return_value = _page(
            rows, total_count=120, total_pages=2
        )
        wallet_service.get_transaction_errors.return_value = [
            FailedTransaction(row_number=4, error="bad date")
        ]

        await manager.select_wallet("w1")

        state = manager.state
        assert state.selected_wallet_id == "w1"
        assert state.selected_wallet.transactions == rows
        assert state.selected_wallet.balance == pytest.approx(-25.0)
        assert state.selected_wallet.total_transaction_count == 120
        assert state.pagination.total_pages == 2
        assert [e.error for e in state.error_transactions] == ["bad date"]
        settings.set_last_wallet_id.assert_called_with("w1")

    @pytest.mark.asyncio
    async def test_select_none_shows_summary(self, manager):
        await manager.load_wallets()
        await manager.select_wallet("w1")

        await manager.select_wallet(None)

        assert manager.state.selected_wallet_id is None
        assert manager.state.error_transactions == ()

    @pytest.mark.asyncio
    async def test_change_page_requests_page(self, manager, wallet_service):
        await manager.load_wallets()
        await manager.select_wallet("w1")
        wallet_service.get_transaction_page.return_value = _page(
            [], page=2, total_count=150, total_pages=2
        )

        await manager.change_page(2)

        wallet_service.get_transaction_page.assert_awaited_with("w1", page=2, limit=100)
        assert manager.state.pagination.current_page == 2

    @pytest.mark.asyncio
    async def test_change_page_without_selection_is_noop(self, manager, wallet_service):
        await manager.change_page(3)
        wallet_service.get_transaction_page.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_out_of_order_page_responses(
        self, manager, wallet_service, make_transaction
    ):
        """A slow page-2 response must not overwrite a faster page-3 response."""
        await manager.load_wallets()
        await manager.select_wallet("w1")

        release_page_2 = asyncio.Event()
        page_2 = _page([make_transaction(id="p2")], page=2, total_count=300, total_pages=3)
        page_3 = _page([make_transaction(id="p3")], page=3, total_count=300, total_pages=3)

        async def get_page(wallet_id, page, limit):
            if page == 2:
                await release_page_2.wait()
                return page_2
            return page_3

        wallet_service.get_transaction_page.side_effect = get_page

        slow = asyncio.ensure_future(manager.change_page(2))
        await asyncio.sleep(0)
        await manager.change_page(3)
        release_page_2.set()
        await slow

        assert manager.state.pagination.current_page == 3
        assert [t.id for t in manager.state.selected_wallet.transactions] == ["p3"]

    @pytest.mark.asyncio
    async def test_page_for_deselected_wallet_is_dropped(
        self, manager, wallet_service, make_transaction
    ):
        await manager.load_wallets()
        await manager.select_wallet("w1")

        release = asyncio.Event()

        async def get_page(wallet_id, page, limit):
            await release.wait()
            return _page([make_transaction()], page=page)

        wallet_service.get_transaction_page.side_effect = get_page

        pending = asyncio.ensure_future(manager.change_page(2))
        await asyncio.sleep(0)
        await manager.select_wallet(None)
        release.set()
        await pending

        assert manager.state.selected_wallet_id is None
        assert manager.state.wallets[0].transactions == []

    @pytest.mark.asyncio
    async def test_page_error_keeps_previous_page(
        self, manager, wallet_service, make_transaction
    ):
        await manager.load_wallets()
        wallet_service.get_transaction_page.return_value = _page([make_transaction()])
        await manager.select_wallet("w1")
        wallet_service.get_transaction_page.side_effect = ApiError(500, "HTTP 500: Internal Server Error")

        await manager.change_page(2)

        assert len(manager.state.selected_wallet.transactions) == 1
        assert manager.state.pagination.current_page == 1
        assert manager.state.error == "HTTP 500: Internal Server Error"

    @pytest.mark.asyncio
    async def test_stored_error_failure_does_not_set_banner(
        self, manager, wallet_service
    ):
        await manager.load_wallets()
        wallet_service.get_transaction_errors.side_effect = ApiError(500, "boom")

        await manager.select_wallet("w1")

        assert manager.state.error is None
        assert manager.state.selected_wallet_id == "w1"

    @pytest.mark.asyncio
    async def test_change_rows_per_page_persists_and_reloads(
        self, manager, wallet_service, settings
    ):
        await manager.load_wallets()
        await manager.select_wallet("w1")

        await manager.change_rows_per_page(50)

        settings.set_rows_per_page.assert_called_once_with(50)
        wallet_service.get_transaction_page.assert_awaited_with("w1", page=1, limit=50)
        assert manager.state.pagination.rows_per_page == 50

    @pytest.mark.asyncio
    async def test_invalid_rows_per_page_is_rejected(self, manager, settings):
        await manager.change_rows_per_page(0)
        assert manager.state.error == "Rows per page must be positive"
        settings.set_rows_per_page.assert_not_called()


class TestUpload:
    """File uploads into the selected wallet."""

    @pytest.mark.asyncio
    async def test_upload_without_wallet_is_rejected(self, manager, wallet_service):
        result = await manager.upload_file(None, "export.csv")

        assert result is None
        assert manager.state.error == SELECT_WALLET_FIRST
        assert manager.state.upload_loading is False
        wallet_service.upload_transactions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_failure_exposes_rejected_rows(self, manager, wallet_service):
        await manager.load_wallets()
        await manager.select_wallet("w1")
        wallet_service.upload_transactions.return_value = UploadResult(
            message="Imported 8 of 10 rows",
            processed_count=8,
            failed_count=2,
            failed_transactions=[
                FailedTransaction(row_number=3, error="Missing date"),
                FailedTransaction(row_number=7, error="Unknown currency"),
            ],
        )
        list_calls = wallet_service.list_wallets.await_count

        result = await manager.upload_file("w1", "export.csv", currency="eur")

        assert result.failed_count == 2
        state = manager.state
        assert [e.row_number for e in state.error_transactions] == [3, 7]
        assert state.upload_message == "Imported 8 of 10 rows"
        assert state.upload_loading is False
        assert wallet_service.list_wallets.await_count == list_calls + 1
        wallet = wallet_service.upload_transactions.await_args.args[0]
        assert wallet.id == "w1"
        assert wallet_service.upload_transactions.await_args.kwargs["currency"] == "eur"

    @pytest.mark.asyncio
    async def test_clean_upload_clears_rejected_rows(self, manager, wallet_service):
        await manager.load_wallets()
        wallet_service.get_transaction_errors.return_value = [
            FailedTransaction(row_number=1, error="old")
        ]
        await manager.select_wallet("w1")
        wallet_service.upload_transactions.return_value = UploadResult(
            message="ok", processed_count=5
        )

        await manager.upload_file("w1", "export.csv")

        assert manager.state.error_transactions == ()

    @pytest.mark.asyncio
    async def test_upload_error_sets_banner(self, manager, wallet_service):
        await manager.load_wallets()
        wallet_service.upload_transactions.side_effect = ValidationError(
            "Invalid file type. Please upload CSV, XLS, or XLSX files."
        )

        assert await manager.upload_file("w1", "notes.txt") is None
        assert manager.state.error.startswith("Invalid file type")
        assert manager.state.upload_loading is False

    @pytest.mark.asyncio
    async def test_detect_currency(self, manager, wallet_service):
        wallet_service.detect_currency.return_value = Mock(currency="PLN")
        assert await manager.detect_currency("export.csv") == "PLN"

    @pytest.mark.asyncio
    async def test_detect_currency_failure(self, manager, wallet_service):
        wallet_service.detect_currency.side_effect = ApiError(422, "Could not detect")
        assert await manager.detect_currency("export.csv") is None
        assert manager.state.error == "Could not detect"


class TestDerivedViews:
    @pytest.mark.asyncio
    async def test_overall_and_selected_stats(
        self, manager, wallet_service, make_transaction
    ):
        await manager.load_wallets()
        assert manager.selected_wallet_stats() is None
        assert manager.overall_stats().total_balance == pytest.approx(1250.0)

        wallet_service.get_transaction_page.return_value = _page(
            [
                make_transaction(transaction_amount=-100.0),
                make_transaction(transaction_type="SELL", transaction_amount=160.0),
            ]
        )
        await manager.select_wallet("w1")

        stats = manager.selected_wallet_stats()
        assert stats.income == pytest.approx(160.0)
        assert stats.expenses == pytest.approx(100.0)
        assert [a.name for a in manager.assets()] == ["AAPL"]
        assert len(manager.balance_growth()) == 1
        assert manager.primary_currency() == "USD"


class TestReset:
    """Clearing the state on sign-out."""

    @pytest.mark.asyncio
    async def test_reset_clears_user_data(self, manager, wallet_service, settings):
        await manager.load_wallets()
        await manager.select_wallet("w1")
        await manager.change_rows_per_page(50)

        manager.reset()

        state = manager.state
        assert state.wallets == ()
        assert state.selected_wallet_id is None
        assert state.error_transactions == ()
        assert state.pagination.rows_per_page == 50
        assert manager.overall_stats().total_balance == 0

    @pytest.mark.asyncio
    async def test_reset_drops_in_flight_wallet_list(self, manager, wallet_service, wallets):
        release = asyncio.Event()

        async def slow_wallets():
            await release.wait()
            return list(wallets)

        wallet_service.list_wallets.side_effect = slow_wallets
        task = asyncio.ensure_future(manager.load_wallets())
        await asyncio.sleep(0)

        manager.reset()
        release.set()

        assert await task is False
        assert manager.state.wallets == ()


class TestMalformedResponses:
    """Backend payloads the models reject end up in the banner."""

    @staticmethod
    def _manager(handler):
        client = FinanceApiClient(
            base_url="http://backend.test",
            session=AuthSession(token="tok", email="ann@example.com"),
            max_retries=1,
            transport=httpx.MockTransport(handler),
        )
        return FinanceManager(WalletService(client), default_page_limit=100)

    @pytest.mark.asyncio
    async def test_null_wallet_balance_loads(self):
        manager = self._manager(
            lambda request: httpx.Response(
                200, json=[{"id": "w1", "name": "W", "balance": None}]
            )
        )

        assert await manager.load_wallets() is True
        assert manager.state.wallets[0].balance == 0.0
        assert manager.state.error is None

    @pytest.mark.asyncio
    async def test_invalid_wallet_list_sets_banner(self):
        manager = self._manager(
            lambda request: httpx.Response(200, json=[{"name": "No id"}])
        )

        assert await manager.load_wallets() is False
        assert manager.state.error.startswith("Unexpected response from /api/wallets")
        assert manager.state.loading is False

    @pytest.mark.asyncio
    async def test_page_row_without_date_sets_banner(self):
        def handler(request):
            if request.url.path == "/api/wallets":
                return httpx.Response(200, json=[{"id": "w1", "name": "W"}])
            if request.url.path == "/api/transactions":
                return httpx.Response(
                    200,
                    json={
                        "transactions": [{"id": "t1", "transaction_amount": 5}],
                        "total_count": 1,
                        "total_pages": 1,
                        "page": 1,
                        "limit": 100,
                    },
                )
            return httpx.Response(200, json=[])

        manager = self._manager(handler)
        await manager.load_wallets()

        await manager.select_wallet("w1")

        assert "transactions.0.date" in manager.state.error
        assert manager.state.selected_wallet_id == "w1"
        assert manager.selected_wallet().transactions == []
