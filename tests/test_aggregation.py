"""Tests for client-side transaction aggregation."""

import pytest

from models.finance import Wallet
from services.aggregation import (
    calculate_all_wallets_stats,
    calculate_balance_growth,
    calculate_deposits_and_income,
    calculate_stats,
    get_all_assets,
    primary_currency,
)


def _wallet(wallet_id, name, transactions, balance=0.0, count=None):
    return Wallet(
        id=wallet_id,
        name=name,
        balance=balance,
        transactions=transactions,
        total_transaction_count=count,
    )


class TestCalculateStats:
    """Sign-based income/expense split."""

    def test_splits_by_sign(self, make_transaction):
        txs = [
            make_transaction(transaction_amount=500.0),
            make_transaction(transaction_amount=-120.5),
            make_transaction(transaction_amount=-79.5),
            make_transaction(transaction_amount=0.0),
        ]

        stats = calculate_stats(txs)

        assert stats.income == pytest.approx(500.0)
        assert stats.expenses == pytest.approx(200.0)
        assert stats.net == pytest.approx(300.0)

    def test_empty_list_is_zero(self):
        stats = calculate_stats([])
        assert stats.income == 0.0
        assert stats.expenses == 0.0

    def test_ignores_transaction_type(self, make_transaction):
        """A SELL with a negative amount still counts as an expense."""
        stats = calculate_stats(
            [make_transaction(transaction_type="SELL", transaction_amount=-30.0)]
        )
        assert stats.income == 0.0
        assert stats.expenses == pytest.approx(30.0)


class TestDepositsAndIncome:
    """Type-based BUY/SELL split."""

    def test_buy_is_absolute_sell_is_signed(self, make_transaction):
        txs = [
            make_transaction(transaction_type="BUY", transaction_amount=-100.0),
            make_transaction(transaction_type="BUY", transaction_amount=40.0),
            make_transaction(transaction_type="SELL", transaction_amount=70.0),
            make_transaction(transaction_type="SELL", transaction_amount=-5.0),
        ]

        result = calculate_deposits_and_income(txs)

        assert result.deposits == pytest.approx(140.0)
        assert result.income == pytest.approx(65.0)

    def test_type_comparison_ignores_case(self, make_transaction):
        txs = [
            make_transaction(transaction_type="buy", transaction_amount=-10.0),
            make_transaction(transaction_type="Sell", transaction_amount=4.0),
        ]

        result = calculate_deposits_and_income(txs)

        assert result.deposits == pytest.approx(10.0)
        assert result.income == pytest.approx(4.0)

    def test_other_types_are_ignored(self, make_transaction):
        txs = [
            make_transaction(transaction_type="DIVIDEND", transaction_amount=12.0),
            make_transaction(transaction_type=None, transaction_amount=-3.0),
        ]

        result = calculate_deposits_and_income(txs)

        assert result.deposits == 0.0
        assert result.income == 0.0


class TestAllWalletsStats:
    """Totals across wallets."""

    def test_balance_comes_from_wallet_records(self, make_transaction):
        wallets = [
            _wallet("w1", "Broker", [make_transaction(transaction_amount=-100.0)], balance=900.0),
            _wallet("w2", "Savings", [], balance=100.0),
        ]

        stats = calculate_all_wallets_stats(wallets)

        assert stats.total_balance == pytest.approx(1000.0)

    def test_transaction_count_prefers_server_count(self, make_transaction):
        wallets = [
            _wallet("w1", "Broker", [make_transaction()], count=250),
            _wallet("w2", "Savings", [make_transaction(), make_transaction()]),
        ]

        stats = calculate_all_wallets_stats(wallets)

        assert stats.total_transactions == 252

    def test_deposits_and_income_span_wallets(self, make_transaction):
        wallets = [
            _wallet("w1", "Broker", [make_transaction(transaction_amount=-100.0)]),
            _wallet(
                "w2",
                "Savings",
                [make_transaction(transaction_type="SELL", transaction_amount=30.0)],
            ),
        ]

        stats = calculate_all_wallets_stats(wallets)

        assert stats.deposits == pytest.approx(100.0)
        assert stats.income == pytest.approx(30.0)

    def test_no_wallets(self):
        stats = calculate_all_wallets_stats([])
        assert stats.total_balance == 0.0
        assert stats.total_transactions == 0


class TestGetAllAssets:
    """Asset rollups across wallets."""

    def test_groups_by_name_across_wallets(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "Broker",
                [
                    make_transaction(asset_name="AAPL", volume=10, transaction_amount=-1000.0),
                    make_transaction(asset_name="MSFT", volume=2, transaction_amount=-600.0),
                ],
            ),
            _wallet(
                "w2",
                "IRA",
                [
                    make_transaction(
                        asset_name="AAPL",
                        transaction_type="SELL",
                        volume=4,
                        transaction_amount=480.0,
                    )
                ],
            ),
        ]

        rollups = get_all_assets(wallets)

        assert [r.name for r in rollups] == ["AAPL", "MSFT"]
        aapl = rollups[0]
        assert aapl.total_deposits == pytest.approx(1000.0)
        assert aapl.total_income == pytest.approx(480.0)
        assert aapl.total_volume == pytest.approx(6.0)
        assert aapl.transaction_count == 2
        assert aapl.wallets == {"Broker", "IRA"}

    def test_first_type_and_currency_win(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "Broker",
                [
                    make_transaction(asset_name="GOLD", asset_type="ETF", currency="EUR"),
                    make_transaction(asset_name="GOLD", asset_type="COMMODITY", currency="USD"),
                ],
            )
        ]

        (gold,) = get_all_assets(wallets)

        assert gold.type == "ETF"
        assert gold.currency == "EUR"
        assert gold.currencies == {"EUR", "USD"}
        assert gold.has_mixed_currencies is True

    def test_other_types_count_but_do_not_move_totals(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "Broker",
                [make_transaction(transaction_type="DIVIDEND", transaction_amount=5.0)],
            )
        ]

        (rollup,) = get_all_assets(wallets)

        assert rollup.transaction_count == 1
        assert rollup.total_deposits == 0.0
        assert rollup.total_income == 0.0
        assert rollup.total_volume == 0.0

    def test_empty(self):
        assert get_all_assets([]) == []


class TestBalanceGrowth:
    """Monthly running balance."""

    def test_running_balance_by_month(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "Broker",
                [
                    make_transaction(date="2024-02-10", transaction_type="SELL", transaction_amount=50.0),
                    make_transaction(date="2024-01-05", transaction_type="BUY", transaction_amount=-100.0),
                    make_transaction(date="2024-02-20", transaction_type="BUY", transaction_amount=-20.0),
                ],
            )
        ]

        points = calculate_balance_growth(wallets)

        assert [p.date for p in points] == ["2024-01", "2024-02"]
        assert points[0].balance == pytest.approx(100.0)
        assert points[0].deposits == pytest.approx(100.0)
        assert points[1].balance == pytest.approx(170.0)
        assert points[1].deposits == pytest.approx(20.0)
        assert points[1].income == pytest.approx(50.0)

    def test_merges_wallets_in_date_order(self, make_transaction):
        wallets = [
            _wallet("w1", "A", [make_transaction(date="2024-03-01", transaction_amount=-10.0)]),
            _wallet("w2", "B", [make_transaction(date="2023-12-31", transaction_amount=-5.0)]),
        ]

        points = calculate_balance_growth(wallets)

        assert [p.date for p in points] == ["2023-12", "2024-03"]
        assert [p.balance for p in points] == pytest.approx([5.0, 15.0])

    def test_other_types_create_flat_month(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "A",
                [
                    make_transaction(date="2024-01-01", transaction_amount=-10.0),
                    make_transaction(
                        date="2024-02-01", transaction_type="FEE", transaction_amount=-3.0
                    ),
                ],
            )
        ]

        points = calculate_balance_growth(wallets)

        assert len(points) == 2
        assert points[1].balance == pytest.approx(10.0)
        assert points[1].deposits == 0.0

    def test_no_transactions(self):
        assert calculate_balance_growth([_wallet("w1", "A", [])]) == []


class TestPrimaryCurrency:
    def test_most_common_currency(self, make_transaction):
        wallets = [
            _wallet(
                "w1",
                "A",
                [
                    make_transaction(currency="EUR"),
                    make_transaction(currency="PLN"),
                    make_transaction(currency="PLN"),
                ],
            )
        ]
        assert primary_currency(wallets) == "PLN"

    def test_defaults_to_usd(self):
        assert primary_currency([]) == "USD"
