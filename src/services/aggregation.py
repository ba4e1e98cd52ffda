"""Client-side aggregation over loaded wallet transactions.

All functions are pure: they read the given wallets/transactions and return
new models. Two independent conventions are used on purpose:

- ``calculate_stats`` splits by the sign of ``transaction_amount``.
- ``calculate_deposits_and_income``, ``get_all_assets`` and
  ``calculate_balance_growth`` split by ``transaction_type``: BUY rows count
  as deposits (absolute amount), SELL rows as income (signed amount).

The two views may disagree for malformed data; they are never merged.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from models.app import (
    AssetRollup,
    BalancePoint,
    DepositsAndIncome,
    OverallStats,
    TransactionStats,
)
from models.finance import DEFAULT_CURRENCY, Transaction, Wallet

logger = logging.getLogger(__name__)

BUY = "BUY"
SELL = "SELL"


def calculate_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    """Sum positive amounts as income and absolute negative amounts as expenses."""
    income = 0.0
    expenses = 0.0
    for tx in transactions:
        amount = tx.transaction_amount
        if amount > 0:
            income += amount
        elif amount < 0:
            expenses += abs(amount)
    return TransactionStats(income=income, expenses=expenses)


def calculate_deposits_and_income(
    transactions: Iterable[Transaction],
) -> DepositsAndIncome:
    """Sum |amount| of BUY rows as deposits and signed amount of SELL rows as income.

    Type comparison ignores case; other or missing types are ignored.
    """
    deposits = 0.0
    income = 0.0
    for tx in transactions:
        tx_type = tx.normalized_type
        if tx_type == BUY:
            deposits += abs(tx.transaction_amount)
        elif tx_type == SELL:
            income += tx.transaction_amount
    return DepositsAndIncome(deposits=deposits, income=income)


def _flatten(wallets: Iterable[Wallet]) -> list[Transaction]:
    return [tx for wallet in wallets for tx in wallet.transactions]


def calculate_all_wallets_stats(wallets: Iterable[Wallet]) -> OverallStats:
    """Totals across wallets.

    ``total_balance`` sums the wallet records' balances (not the loaded rows);
    ``total_transactions`` prefers each wallet's server count and falls back
    to the number of loaded rows.
    """
    wallets = list(wallets)
    split = calculate_deposits_and_income(_flatten(wallets))
    return OverallStats(
        total_balance=sum(w.balance for w in wallets),
        total_transactions=sum(w.known_transaction_count for w in wallets),
        deposits=split.deposits,
        income=split.income,
    )


def get_all_assets(wallets: Iterable[Wallet]) -> list[AssetRollup]:
    """Group every loaded transaction by ``asset_name`` across wallets.

    Rows with the same name but a different ``asset_type`` are merged; the
    first type and currency seen are kept. Volume grows on BUY and shrinks on
    SELL. Owning wallets are taken from the wallet being iterated.

    Returns:
        Rollups in first-seen order
    """
    rollups: dict[str, AssetRollup] = {}
    for wallet in wallets:
        for tx in wallet.transactions:
            rollup = rollups.get(tx.asset_name)
            if rollup is None:
                rollup = AssetRollup(
                    name=tx.asset_name, type=tx.asset_type, currency=tx.currency
                )
                rollups[tx.asset_name] = rollup

            rollup.transaction_count += 1
            rollup.wallets.add(wallet.name)
            rollup.currencies.add(tx.currency)

            tx_type = tx.normalized_type
            if tx_type == BUY:
                rollup.total_deposits += abs(tx.transaction_amount)
                rollup.total_volume += tx.volume
            elif tx_type == SELL:
                rollup.total_income += tx.transaction_amount
                rollup.total_volume -= tx.volume

    mixed = [r.name for r in rollups.values() if r.has_mixed_currencies]
    if mixed:
        logger.debug("Assets with mixed currencies: %s", ", ".join(mixed))
    return list(rollups.values())


def calculate_balance_growth(wallets: Iterable[Wallet]) -> list[BalancePoint]:
    """Monthly running balance built from BUY and SELL rows.

    The running balance grows by |amount| on BUY and by the signed amount on
    SELL. Each ``YYYY-MM`` bucket holds the end-of-month running balance and
    the month's deposits and income. Rows of other types create their month
    bucket without moving the balance.

    Example:
        Jan BUY -100, Feb SELL 50, Feb BUY -20 gives
        ``[("2024-01", 100), ("2024-02", 170)]``.

    Returns:
        One point per distinct month, ascending
    """
    transactions = sorted(_flatten(wallets), key=lambda tx: tx.date)

    buckets: dict[str, BalancePoint] = {}
    running = 0.0
    for tx in transactions:
        key = tx.month_key
        point = buckets.get(key)
        if point is None:
            point = BalancePoint(date=key)
            buckets[key] = point

        tx_type = tx.normalized_type
        if tx_type == BUY:
            amount = abs(tx.transaction_amount)
            running += amount
            point.deposits += amount
        elif tx_type == SELL:
            running += tx.transaction_amount
            point.income += tx.transaction_amount
        point.balance = running

    return [buckets[key] for key in sorted(buckets)]


def primary_currency(wallets: Iterable[Wallet]) -> str:
    """Most common currency among loaded transactions (first seen wins ties)."""
    counts = Counter(tx.currency for tx in _flatten(wallets))
    if not counts:
        return DEFAULT_CURRENCY
    return counts.most_common(1)[0][0]
