"""Holdings service interface (Protocol).

Defines the contract that holdings service implementations must satisfy so
the dashboard and CLI can take any implementation by dependency injection.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Protocol

from foliotrack.services.holdings.engine import PriceLookup
from foliotrack.services.holdings.models import ClosedLot, Holding, PortfolioSummary, Transaction


class IHoldingsService(Protocol):
    """
    Holdings service interface.

    Stateless: every call replays the transactions it is given, so the
    same inputs always produce the same outputs.

    Example:
        >>> service: IHoldingsService = HoldingsService()
        >>> holdings = service.get_holdings(transactions, "growth", quotes.get_price)
        >>> realized = service.get_realized_pl(transactions, "growth")
    """

    def get_holdings(
        self,
        transactions: Iterable[Transaction],
        portfolio_id: str,
        price_lookup: PriceLookup | None = None,
        sectors: Mapping[str, str] | None = None,
    ) -> list[Holding]:
        """
        Open positions of one portfolio at weighted-average cost.

        Args:
            transactions: Transactions of any portfolios, in any order
            portfolio_id: Portfolio to compute
            price_lookup: Current prices; missing tickers fall back to average cost
            sectors: Optional ticker -> sector mapping

        Returns:
            One Holding per ticker with quantity > 0

        Raises:
            OversellError: In strict mode, if a SELL exceeds the held quantity
        """
        ...

    def get_realized_pl(self, transactions: Iterable[Transaction], portfolio_id: str | None = None) -> Decimal:
        """
        Realized P&L under FIFO lot matching, net of SELL fees.

        Args:
            transactions: Transactions in any order
            portfolio_id: Restrict to one portfolio; None aggregates all

        Raises:
            OversellError: In strict mode, if a SELL exceeds the open lots
        """
        ...

    def get_closed_lots(self, transactions: Iterable[Transaction], portfolio_id: str | None = None) -> list[ClosedLot]:
        """Closed lot fragments behind get_realized_pl, in replay order."""
        ...

    def summarize(self, holdings: Iterable[Holding]) -> PortfolioSummary:
        """Totals over a holding list."""
        ...
