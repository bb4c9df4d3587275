"""Exceptions raised by the holdings engine."""

from decimal import Decimal


class OversellError(ValueError):
    """A SELL exceeds the quantity tracked for its ticker (strict mode only)."""

    def __init__(self, ticker: str, requested: Decimal, available: Decimal) -> None:
        self.ticker = ticker
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient quantity for {ticker}: need {requested}, have {available}")
