"""Lot tracker for FIFO position accounting.

Holds the open purchase tranches of one ticker, oldest first, and matches
sells against them First In, First Out.
"""

from collections import deque
from decimal import Decimal
from typing import TYPE_CHECKING

from foliotrack.services.holdings.exceptions import OversellError

if TYPE_CHECKING:
    from foliotrack.services.holdings.models import Lot


class LotTracker:
    """
    FIFO queue of open lots for a single ticker.

    Example:
        >>> tracker = LotTracker("AAPL")
        >>> tracker.add_lot(lot)  # 10 @ $100
        >>> matches, unmatched = tracker.match_close(Decimal("4"))
        >>> # matches: [(Lot(10@$100), 4)], tracker keeps Lot(6@$100)
    """

    def __init__(self, ticker: str = "") -> None:
        """Initialize lot tracker."""
        self.ticker = ticker
        self._lots: deque["Lot"] = deque()

    def add_lot(self, lot: "Lot") -> None:
        """
        Append lot to the back of the queue.

        Raises:
            ValueError: If lot quantity is not positive
        """
        if lot.quantity <= 0:
            raise ValueError("Cannot add lot with non-positive quantity")
        self._lots.append(lot)

    def get_lots(self) -> list["Lot"]:
        """Open lots, oldest first."""
        return list(self._lots)

    def get_total_quantity(self) -> Decimal:
        """Units still open across all lots."""
        return sum((lot.quantity for lot in self._lots), start=Decimal("0"))

    def get_total_cost(self) -> Decimal:
        """Sum of quantity * price over open lots."""
        return sum((lot.quantity * lot.price for lot in self._lots), start=Decimal("0"))

    def has_lots(self) -> bool:
        return len(self._lots) > 0

    def clear(self) -> None:
        self._lots.clear()

    def match_close(self, quantity: Decimal, strict: bool = False) -> tuple[list[tuple["Lot", Decimal]], Decimal]:
        """
        Match quantity against open lots, oldest first.

        A partially consumed lot is replaced at the front of the queue by a
        copy holding the remaining quantity. When the queue runs out the
        rest of the quantity is returned unmatched.

        Args:
            quantity: Quantity to close (positive)
            strict: Raise instead of returning an unmatched remainder

        Returns:
            (matches, unmatched): ``(lot, quantity_closed)`` tuples in match
            order, and the quantity left over once the queue was empty

        Raises:
            ValueError: If quantity is zero/negative
            OversellError: If strict and quantity exceeds the open lots

        Example:
            >>> # Close 12 from [10@$100, 5@$120]
            >>> matches, unmatched = tracker.match_close(Decimal("12"))
            >>> # matches: [(Lot(10@$100), 10), (Lot(5@$120), 2)], unmatched: 0
            >>> # Leaves: [Lot(3@$120)]
        """
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {quantity}")

        if strict:
            available = self.get_total_quantity()
            if quantity > available:
                raise OversellError(self.ticker, quantity, available)

        matches: list[tuple["Lot", Decimal]] = []
        remaining_to_close = quantity

        while remaining_to_close > 0 and self._lots:
            lot = self._lots.popleft()

            if lot.quantity <= remaining_to_close:
                matches.append((lot, lot.quantity))
                remaining_to_close -= lot.quantity
            else:
                matches.append((lot, remaining_to_close))
                self._lots.appendleft(lot.model_copy(update={"quantity": lot.quantity - remaining_to_close}))
                remaining_to_close = Decimal("0")

        return matches, remaining_to_close
