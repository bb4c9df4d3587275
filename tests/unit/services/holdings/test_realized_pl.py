"""Unit tests for FIFO realized P&L."""

from decimal import Decimal

import pytest

from foliotrack.services.holdings.engine import compute_closed_lots, compute_realized_pl
from foliotrack.services.holdings.exceptions import OversellError


@pytest.fixture
def two_lot_sell(make_tx):
    """BUY 10@100, BUY 5@120, SELL 12@110 with $2 fees."""
    return [
        make_tx("BUY", "AAPL", "10", "100", date="2024-01-01"),
        make_tx("BUY", "AAPL", "5", "120", date="2024-01-02"),
        make_tx("SELL", "AAPL", "12", "110", date="2024-01-03", fees="2", transaction_id="s1"),
    ]


class TestFIFORealizedPL:
    def test_sell_spanning_two_lots(self, two_lot_sell):
        assert compute_realized_pl(two_lot_sell, "p1") == Decimal("78")

    def test_closed_lot_fragments(self, two_lot_sell):
        closed = compute_closed_lots(two_lot_sell, "p1")

        assert [(c.quantity, c.cost_price, c.sell_price) for c in closed] == [
            (Decimal("10"), Decimal("100"), Decimal("110")),
            (Decimal("2"), Decimal("120"), Decimal("110")),
        ]
        assert all(c.sell_transaction_id == "s1" for c in closed)

    def test_fee_charged_once_per_sell(self, two_lot_sell):
        closed = compute_closed_lots(two_lot_sell, "p1")

        assert [c.fees for c in closed] == [Decimal("2"), Decimal("0")]

    def test_buy_fees_not_in_realized(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "10", "100", date="2024-01-01", fees="5"),
            make_tx("SELL", "AAPL", "10", "110", date="2024-01-02"),
        ]

        assert compute_realized_pl(transactions, "p1") == Decimal("100")

    def test_consecutive_sells_continue_fifo(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "10", "100", date="2024-01-01"),
            make_tx("BUY", "AAPL", "10", "200", date="2024-01-02"),
            make_tx("SELL", "AAPL", "5", "150", date="2024-01-03"),
            make_tx("SELL", "AAPL", "10", "150", date="2024-01-04"),
        ]

        # 5@100, then 5@100 + 5@200
        assert compute_realized_pl(transactions, "p1") == Decimal("250")

    def test_loss(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "2", "100", date="2024-01-01"),
            make_tx("SELL", "AAPL", "2", "90", date="2024-01-02", fees="1"),
        ]

        assert compute_realized_pl(transactions, "p1") == Decimal("-21")


class TestOversell:
    def test_only_matched_units_realized(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "5", "100", date="2024-01-01"),
            make_tx("SELL", "AAPL", "10", "110", date="2024-01-02", fees="3"),
        ]

        assert compute_realized_pl(transactions, "p1") == Decimal("5") * 110 - Decimal("5") * 100 - 3

    def test_sell_with_no_lots_has_no_fee(self, make_tx):
        transactions = [make_tx("SELL", "AAPL", "1", "110", fees="3")]

        assert compute_closed_lots(transactions, "p1") == []
        assert compute_realized_pl(transactions, "p1") == Decimal("0")

    def test_strict_raises(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "5", "100", date="2024-01-01"),
            make_tx("SELL", "AAPL", "10", "110", date="2024-01-02"),
        ]

        with pytest.raises(OversellError):
            compute_realized_pl(transactions, "p1", strict=True)


class TestScope:
    def test_lots_are_per_portfolio(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "10", "100", date="2024-01-01", portfolio_id="p1"),
            make_tx("BUY", "AAPL", "10", "50", date="2024-01-02", portfolio_id="p2"),
            make_tx("SELL", "AAPL", "10", "110", date="2024-01-03", portfolio_id="p2"),
        ]

        assert compute_realized_pl(transactions, "p1") == Decimal("0")
        assert compute_realized_pl(transactions, "p2") == Decimal("600")

    def test_none_aggregates_all_portfolios(self, make_tx):
        transactions = [
            make_tx("BUY", "AAPL", "10", "100", date="2024-01-01", portfolio_id="p1"),
            make_tx("SELL", "AAPL", "10", "110", date="2024-01-02", portfolio_id="p1"),
            make_tx("BUY", "MSFT", "1", "50", date="2024-01-01", portfolio_id="p2"),
            make_tx("SELL", "MSFT", "1", "40", date="2024-01-02", portfolio_id="p2"),
        ]

        assert compute_realized_pl(transactions) == Decimal("90")

    def test_unsorted_input(self, two_lot_sell):
        assert compute_realized_pl(list(reversed(two_lot_sell)), "p1") == Decimal("78")


def test_empty_input():
    assert compute_realized_pl([], "p1") == Decimal("0")
    assert compute_closed_lots([]) == []
