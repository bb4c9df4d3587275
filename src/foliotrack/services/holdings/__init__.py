"""Holdings engine: open positions and realized P&L from transactions.

Key components:
- compute_holdings: Weighted-average replay, valued open positions
- compute_realized_pl / compute_closed_lots: Strict FIFO replay
- HoldingsService: Configured, logging entry point
- IHoldingsService: Protocol interface
- LotTracker: FIFO lot queue
- Models: Transaction, Lot, Position, Holding, ClosedLot, PortfolioSummary, EngineConfig

Example:
    >>> from foliotrack.services.holdings import HoldingsService, Transaction
    >>> from decimal import Decimal
    >>>
    >>> transactions = [
    ...     Transaction(portfolio_id="p1", date="2024-01-02", action="BUY",
    ...                 ticker="AAPL", quantity=Decimal("10"), trade_price=Decimal("100")),
    ...     Transaction(portfolio_id="p1", date="2024-03-01", action="SELL",
    ...                 ticker="AAPL", quantity=Decimal("4"), trade_price=Decimal("120"),
    ...                 fees=Decimal("1")),
    ... ]
    >>> service = HoldingsService()
    >>> service.get_holdings(transactions, "p1", {"AAPL": Decimal("125")})[0].quantity
    Decimal('6')
    >>> service.get_realized_pl(transactions, "p1")
    Decimal('79')
"""

from foliotrack.services.holdings.engine import (
    PriceLookup,
    compute_closed_lots,
    compute_holdings,
    compute_realized_pl,
    replay_positions,
)
from foliotrack.services.holdings.exceptions import OversellError
from foliotrack.services.holdings.interface import IHoldingsService
from foliotrack.services.holdings.lot_tracker import LotTracker
from foliotrack.services.holdings.models import (
    ClosedLot,
    EngineConfig,
    Holding,
    Lot,
    PortfolioSummary,
    Position,
    Transaction,
    TransactionAction,
)
from foliotrack.services.holdings.service import HoldingsService

__all__ = [
    # Service
    "IHoldingsService",
    "HoldingsService",
    # Replays
    "PriceLookup",
    "compute_holdings",
    "compute_closed_lots",
    "compute_realized_pl",
    "replay_positions",
    # Lots
    "LotTracker",
    "OversellError",
    # Models
    "Transaction",
    "TransactionAction",
    "Lot",
    "Position",
    "Holding",
    "ClosedLot",
    "PortfolioSummary",
    "EngineConfig",
]
