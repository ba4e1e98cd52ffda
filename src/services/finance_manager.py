"""Wallet and transaction orchestrator behind the finance views.

``FinanceManager`` owns the wallet list, the selected wallet's transaction
page, the pagination state, the error banner and the rows rejected by the
last upload. Views never mutate this state; they call the async operations
below and re-render from the ``FinanceState`` snapshot passed to listeners.

Every fetch takes a ticket from a ``RequestSequence``. A response is applied
only while its ticket is still the latest for that fetch kind, so a slow
response can never overwrite the state requested after it. Failed or stale
responses leave the previous state in place.

API and validation errors (``FinanceManagerError``) are caught here, logged
and turned into the ``error`` banner string.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from models.app import (
    AssetRollup,
    BalancePoint,
    OverallStats,
    TransactionStats,
)
from models.finance import FailedTransaction, UploadResult, Wallet
from services.aggregation import (
    calculate_all_wallets_stats,
    calculate_balance_growth,
    calculate_stats,
    get_all_assets,
    primary_currency,
)
from services.pagination import DEFAULT_PAGE_LIMIT, PaginationState
from services.wallet_service import SELECT_WALLET_FIRST
from utils.exceptions import FinanceManagerError, ValidationError
from utils.request_guards import RequestSequence

if TYPE_CHECKING:
    from services.wallet_service import WalletService
    from utils.settings_manager import SettingsManager

logger = logging.getLogger(__name__)

# Fetch kinds guarded by the request sequence
WALLETS = "wallets"
PAGE = "page"
ERRORS = "errors"


@dataclass(frozen=True)
class FinanceState:
    """Immutable snapshot of everything the finance views render."""

    wallets: tuple[Wallet, ...] = ()
    selected_wallet_id: str | None = None
    pagination: PaginationState = field(default_factory=PaginationState)
    error: str | None = None
    error_transactions: tuple[FailedTransaction, ...] = ()
    loading: bool = False
    upload_loading: bool = False
    upload_message: str | None = None

    @property
    def selected_wallet(self) -> Wallet | None:
        if self.selected_wallet_id is None:
            return None
        for wallet in self.wallets:
            if wallet.id == self.selected_wallet_id:
                return wallet
        return None


StateListener = Callable[[FinanceState], None]


class FinanceManager:
    """Orchestrates wallet, transaction page and upload state."""

    def __init__(
        self,
        wallet_service: WalletService,
        settings_manager: SettingsManager | None = None,
        default_page_limit: int = DEFAULT_PAGE_LIMIT,
    ) -> None:
        self._wallet_service = wallet_service
        self._settings = settings_manager

        rows_per_page = default_page_limit
        if settings_manager is not None:
            rows_per_page = settings_manager.get_rows_per_page() or default_page_limit
        self._default_rows_per_page = rows_per_page

        self._state = FinanceState(pagination=PaginationState.initial(rows_per_page))
        self._sequence = RequestSequence()
        self._listeners: list[StateListener] = []
        self._in_flight = 0

    # ------------------------------------------------------------------
    # State & listeners
    # ------------------------------------------------------------------

    @property
    def state(self) -> FinanceState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` after every state change; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _fail(self, action: str, error: FinanceManagerError) -> None:
        logger.error("%s failed: %s", action, error)
        self._update(error=str(error))

    def _begin(self) -> None:
        self._in_flight += 1
        self._update(loading=True)

    def _end(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        self._update(loading=self._in_flight > 0)

    # ------------------------------------------------------------------
    # Start-up
    # ------------------------------------------------------------------

    async def initialize(
        self, restore_session: Callable[[], Awaitable[object]] | None = None
    ) -> None:
        """Restore the backend session, load wallets and reselect the last wallet."""
        if restore_session is not None:
            try:
                await restore_session()
            except FinanceManagerError as e:
                self._fail("Session restore", e)
                return

        if not await self.load_wallets():
            return

        last_wallet_id = self._settings.get_last_wallet_id() if self._settings else None
        if last_wallet_id and any(w.id == last_wallet_id for w in self._state.wallets):
            await self.select_wallet(last_wallet_id)

    # ------------------------------------------------------------------
    # Wallets
    # ------------------------------------------------------------------

    async def load_wallets(self) -> bool:
        """Fetch the wallet list, keeping server balances and loaded pages.

        Returns:
            True if the response was applied.
        """
        ticket = self._sequence.next(WALLETS)
        self._begin()
        try:
            wallets = await self._wallet_service.list_wallets()
        except FinanceManagerError as e:
            if self._sequence.is_current(WALLETS, ticket):
                self._fail("Loading wallets", e)
            return False
        finally:
            self._end()

        if not self._sequence.is_current(WALLETS, ticket):
            logger.debug("Dropping stale wallet list response (ticket %d)", ticket)
            return False

        loaded = {w.id: w for w in self._state.wallets}
        merged = []
        for wallet in wallets:
            previous = loaded.get(wallet.id)
            if previous is not None and previous.transactions:
                wallet = wallet.model_copy(update={"transactions": previous.transactions})
            merged.append(wallet)

        changes: dict[str, Any] = {"wallets": tuple(merged), "error": None}
        selected = self._state.selected_wallet_id
        if selected is not None and selected not in {w.id for w in merged}:
            self._sequence.invalidate(PAGE)
            changes.update(selected_wallet_id=None, error_transactions=())
        self._update(**changes)
        return True

    async def add_wallet(self, name: str) -> Wallet | None:
        """Create a wallet and append it to the list."""
        try:
            wallet = await self._wallet_service.create_wallet(name)
        except FinanceManagerError as e:
            self._fail("Creating wallet", e)
            return None
        self._update(wallets=(*self._state.wallets, wallet), error=None)
        return wallet

    async def remove_wallet(self, wallet_id: str) -> bool:
        """Delete a wallet; clears the selection if it was selected."""
        try:
            await self._wallet_service.delete_wallet(wallet_id)
        except FinanceManagerError as e:
            self._fail("Deleting wallet", e)
            return False

        wallets = tuple(w for w in self._state.wallets if w.id != wallet_id)
        if self._state.selected_wallet_id == wallet_id:
            self._sequence.invalidate(PAGE)
            self._sequence.invalidate(ERRORS)
            self._update(wallets=wallets, selected_wallet_id=None, error_transactions=())
            self._remember_selection(None)
        else:
            self._update(wallets=wallets)
        return True

    # ------------------------------------------------------------------
    # Selection & pagination
    # ------------------------------------------------------------------

    async def select_wallet(self, wallet_id: str | None) -> None:
        """Show a wallet's first page, or the summary view when None."""
        self._remember_selection(wallet_id)
        if wallet_id is None:
            self._sequence.invalidate(PAGE)
            self._sequence.invalidate(ERRORS)
            self._update(selected_wallet_id=None, error_transactions=())
            return

        if wallet_id != self._state.selected_wallet_id:
            wallet = next((w for w in self._state.wallets if w.id == wallet_id), None)
            pagination = replace(
                PaginationState.initial(self._state.pagination.rows_per_page),
                loaded_rows=len(wallet.transactions) if wallet else 0,
            )
            self._update(
                selected_wallet_id=wallet_id,
                pagination=pagination,
                error_transactions=(),
                error=None,
            )

        limit = self._state.pagination.rows_per_page
        await asyncio.gather(
            self._fetch_page(wallet_id, 1, limit),
            self._fetch_errors(wallet_id),
        )

    async def change_page(self, page: int) -> None:
        """Load the given 1-based page of the selected wallet."""
        wallet_id = self._state.selected_wallet_id
        if wallet_id is None:
            return
        await self._fetch_page(wallet_id, page, self._state.pagination.rows_per_page)

    async def change_rows_per_page(self, limit: int) -> None:
        """Switch page size and reload page 1 of the selected wallet."""
        if limit < 1:
            self._fail("Changing rows per page", ValidationError("Rows per page must be positive"))
            return
        self._update(pagination=self._state.pagination.with_rows_per_page(limit))
        if self._settings is not None:
            self._settings.set_rows_per_page(limit)

        wallet_id = self._state.selected_wallet_id
        if wallet_id is not None:
            await self._fetch_page(wallet_id, 1, limit)

    async def refresh(self) -> None:
        """Reload wallets and the currently displayed page."""
        await self.load_wallets()
        wallet_id = self._state.selected_wallet_id
        if wallet_id is not None:
            pagination = self._state.pagination
            await self._fetch_page(
                wallet_id, pagination.safe_page + 1, pagination.rows_per_page
            )

    async def _fetch_page(self, wallet_id: str, page: int, limit: int) -> bool:
        ticket = self._sequence.next(PAGE)
        self._begin()
        try:
            result = await self._wallet_service.get_transaction_page(
                wallet_id, page=page, limit=limit
            )
        except FinanceManagerError as e:
            if self._sequence.is_current(PAGE, ticket):
                self._fail(f"Loading page {page}", e)
            return False
        finally:
            self._end()

        if (
            not self._sequence.is_current(PAGE, ticket)
            or self._state.selected_wallet_id != wallet_id
        ):
            logger.debug(
                "Dropping stale page %d response for wallet %s (ticket %d)",
                page,
                wallet_id,
                ticket,
            )
            return False

        wallets = tuple(
            w.with_page(result.transactions, result.total_count) if w.id == wallet_id else w
            for w in self._state.wallets
        )
        self._update(
            wallets=wallets,
            pagination=self._state.pagination.with_page(result),
        )
        logger.debug(
            "Applied page %d/%d for wallet %s", result.page, result.total_pages, wallet_id
        )
        return True

    async def _fetch_errors(self, wallet_id: str) -> None:
        ticket = self._sequence.next(ERRORS)
        try:
            rows = await self._wallet_service.get_transaction_errors(wallet_id)
        except FinanceManagerError as e:
            # Stored upload errors are secondary; the page itself may still load
            logger.warning("Loading stored upload errors for %s failed: %s", wallet_id, e)
            return
        if (
            self._sequence.is_current(ERRORS, ticket)
            and self._state.selected_wallet_id == wallet_id
        ):
            self._update(error_transactions=tuple(rows))

    def _remember_selection(self, wallet_id: str | None) -> None:
        if self._settings is not None:
            self._settings.set_last_wallet_id(wallet_id)

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_file(
        self, wallet_id: str | None, file_path: str | Path, currency: str | None = None
    ) -> UploadResult | None:
        """Upload a transaction file into a wallet, then reload.

        Rows rejected by the backend are exposed as ``error_transactions``;
        they are cleared by the next upload without failures.
        """
        wallet = next((w for w in self._state.wallets if w.id == wallet_id), None)
        self._update(upload_loading=True, upload_message=None)
        try:
            if wallet is None:
                raise ValidationError(SELECT_WALLET_FIRST)
            result = await self._wallet_service.upload_transactions(
                wallet, file_path, currency=currency
            )
        except FinanceManagerError as e:
            self._update(upload_loading=False)
            self._fail("Upload", e)
            return None

        if result.has_failures:
            logger.warning(
                "Upload into %s rejected %d rows", wallet.name, result.failed_count
            )
            self._update(
                upload_loading=False,
                upload_message=result.message or None,
                error_transactions=tuple(result.failed_transactions),
            )
        else:
            self._update(
                upload_loading=False,
                upload_message=result.message or None,
                error_transactions=(),
                error=None,
            )

        await self.load_wallets()
        if self._state.selected_wallet_id == wallet.id:
            pagination = self._state.pagination
            await self._fetch_page(
                wallet.id, pagination.safe_page + 1, pagination.rows_per_page
            )
        return result

    async def detect_currency(self, file_path: str | Path) -> str | None:
        """Ask the backend which currency an upload file uses."""
        try:
            detection = await self._wallet_service.detect_currency(file_path)
        except FinanceManagerError as e:
            self._fail("Currency detection", e)
            return None
        return detection.currency

    def dismiss_error(self) -> None:
        self._update(error=None)

    def reset(self) -> None:
        """Forget every wallet and page, e.g. after the user signs out.

        In-flight responses are invalidated so they cannot repopulate the
        cleared state. Rows per page is a device preference and is kept.
        """
        for kind in (WALLETS, PAGE, ERRORS):
            self._sequence.invalidate(kind)
        rows_per_page = self._state.pagination.rows_per_page
        self._update(
            wallets=(),
            selected_wallet_id=None,
            pagination=PaginationState.initial(rows_per_page),
            error=None,
            error_transactions=(),
            upload_message=None,
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def selected_wallet(self) -> Wallet | None:
        return self._state.selected_wallet

    def overall_stats(self) -> OverallStats:
        return calculate_all_wallets_stats(self._state.wallets)

    def selected_wallet_stats(self) -> TransactionStats | None:
        """Sign-based stats of the selected wallet's loaded page."""
        wallet = self._state.selected_wallet
        if wallet is None:
            return None
        return calculate_stats(wallet.transactions)

    def assets(self) -> list[AssetRollup]:
        return get_all_assets(self._state.wallets)

    def balance_growth(self) -> list[BalancePoint]:
        return calculate_balance_growth(self._state.wallets)

    def primary_currency(self) -> str:
        return primary_currency(self._state.wallets)
