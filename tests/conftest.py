"""Shared fixtures for foliotrack tests."""

from decimal import Decimal
from pathlib import Path

import pytest

from foliotrack.services.holdings import Transaction

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample book and market files."""
    return FIXTURES_DIR


@pytest.fixture
def make_tx():
    """
    Factory for transactions with sensible defaults.

    Example:
        make_tx("BUY", "AAPL", "10", "100", date="2024-01-02")
    """

    def _make(
        action: str,
        ticker: str,
        quantity: str,
        price: str,
        date: str = "2024-01-02",
        portfolio_id: str = "p1",
        fees: str = "0",
        currency: str = "USD",
        **extra,
    ) -> Transaction:
        return Transaction(
            portfolio_id=portfolio_id,
            date=date,
            action=action,
            ticker=ticker,
            quantity=Decimal(quantity),
            trade_price=Decimal(price),
            fees=Decimal(fees),
            currency=currency,
            **extra,
        )

    return _make
