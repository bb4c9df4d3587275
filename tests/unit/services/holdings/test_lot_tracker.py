"""Unit tests for LotTracker - FIFO matching logic."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from foliotrack.services.holdings.exceptions import OversellError
from foliotrack.services.holdings.lot_tracker import LotTracker
from foliotrack.services.holdings.models import Lot


@pytest.fixture
def timestamp() -> datetime:
    """Standard timestamp for tests."""
    return datetime(2024, 1, 15, tzinfo=timezone.utc)


def make_lot(quantity: str, price: str, timestamp: datetime, transaction_id: str) -> Lot:
    return Lot(
        quantity=Decimal(quantity),
        price=Decimal(price),
        opened_at=timestamp,
        transaction_id=transaction_id,
    )


class TestFIFOMatching:
    """Test FIFO matching against open lots."""

    def test_match_full_close_single_lot(self, timestamp: datetime) -> None:
        """Test closing entire position with one lot."""
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("100", "150", timestamp, "t1"))

        matches, unmatched = tracker.match_close(Decimal("100"))

        assert len(matches) == 1
        assert matches[0][0].transaction_id == "t1"
        assert matches[0][1] == Decimal("100")
        assert unmatched == Decimal("0")
        assert not tracker.has_lots()

    def test_match_partial_close_single_lot(self, timestamp: datetime) -> None:
        """Test partial close leaves the remainder at the front."""
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("100", "150", timestamp, "t1"))

        matches, unmatched = tracker.match_close(Decimal("60"))

        assert matches[0][1] == Decimal("60")
        assert unmatched == Decimal("0")

        remaining = tracker.get_lots()
        assert len(remaining) == 1
        assert remaining[0].quantity == Decimal("40")
        assert remaining[0].price == Decimal("150")  # Same price
        assert remaining[0].transaction_id == "t1"

    def test_match_fifo_order_multiple_lots(self, timestamp: datetime) -> None:
        """Test FIFO matching closes oldest first."""
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("10", "100", timestamp, "t1"))
        tracker.add_lot(make_lot("5", "120", timestamp, "t2"))

        matches, unmatched = tracker.match_close(Decimal("12"))

        assert [(lot.transaction_id, qty) for lot, qty in matches] == [
            ("t1", Decimal("10")),
            ("t2", Decimal("2")),
        ]
        assert unmatched == Decimal("0")
        assert tracker.get_total_quantity() == Decimal("3")
        assert tracker.get_lots()[0].price == Decimal("120")

    def test_oversell_returns_unmatched(self, timestamp: datetime) -> None:
        """Test quantity beyond the open lots comes back unmatched."""
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("5", "100", timestamp, "t1"))

        matches, unmatched = tracker.match_close(Decimal("8"))

        assert len(matches) == 1
        assert matches[0][1] == Decimal("5")
        assert unmatched == Decimal("3")
        assert not tracker.has_lots()

    def test_close_on_empty_tracker(self) -> None:
        """Test closing with no lots matches nothing."""
        tracker = LotTracker("AAPL")

        matches, unmatched = tracker.match_close(Decimal("4"))

        assert matches == []
        assert unmatched == Decimal("4")

    def test_strict_oversell_raises_and_leaves_lots(self, timestamp: datetime) -> None:
        """Test strict mode refuses an oversell without consuming lots."""
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("5", "100", timestamp, "t1"))

        with pytest.raises(OversellError) as exc_info:
            tracker.match_close(Decimal("10"), strict=True)

        assert exc_info.value.ticker == "AAPL"
        assert exc_info.value.requested == Decimal("10")
        assert exc_info.value.available == Decimal("5")
        assert tracker.get_total_quantity() == Decimal("5")

    @pytest.mark.parametrize("quantity", ["0", "-1"])
    def test_non_positive_close_rejected(self, quantity: str) -> None:
        tracker = LotTracker("AAPL")

        with pytest.raises(ValueError, match="must be positive"):
            tracker.match_close(Decimal(quantity))


class TestLotTrackerTotals:
    """Test aggregate queries."""

    def test_totals(self, timestamp: datetime) -> None:
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("10", "100", timestamp, "t1"))
        tracker.add_lot(make_lot("5", "120", timestamp, "t2"))

        assert tracker.get_total_quantity() == Decimal("15")
        assert tracker.get_total_cost() == Decimal("1600")

    def test_empty_totals(self) -> None:
        tracker = LotTracker()

        assert tracker.get_total_quantity() == Decimal("0")
        assert tracker.get_total_cost() == Decimal("0")
        assert tracker.get_lots() == []

    def test_clear(self, timestamp: datetime) -> None:
        tracker = LotTracker("AAPL")
        tracker.add_lot(make_lot("10", "100", timestamp, "t1"))

        tracker.clear()

        assert not tracker.has_lots()
