"""Holdings service: configured entry point to the replay engine."""

from collections.abc import Iterable, Mapping
from decimal import Decimal

import structlog

from foliotrack.services.holdings.engine import (
    ZERO,
    PriceLookup,
    compute_closed_lots,
    compute_holdings,
    percent,
)
from foliotrack.services.holdings.models import ClosedLot, EngineConfig, Holding, PortfolioSummary, Transaction

logger = structlog.get_logger(__name__)


class HoldingsService:
    """
    Holdings service implementation.

    Wraps the pure replay functions with the configured engine policy and
    logs a summary of each computation. Holds no state between calls, so
    one instance can serve any number of portfolios concurrently.

    Example:
        >>> service = HoldingsService(EngineConfig(strict=True))
        >>> holdings = service.get_holdings(transactions, "growth", {"AAPL": Decimal("190")})
        >>> summary = service.summarize(holdings)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def get_holdings(
        self,
        transactions: Iterable[Transaction],
        portfolio_id: str,
        price_lookup: PriceLookup | None = None,
        sectors: Mapping[str, str] | None = None,
    ) -> list[Holding]:
        holdings = compute_holdings(
            transactions,
            portfolio_id,
            price_lookup,
            sectors=sectors,
            strict=self.config.strict,
        )
        logger.debug(
            "holdings.computed",
            portfolio_id=portfolio_id,
            holdings=len(holdings),
            fallback_prices=sum(1 for h in holdings if h.price_is_fallback),
        )
        return holdings

    def get_closed_lots(self, transactions: Iterable[Transaction], portfolio_id: str | None = None) -> list[ClosedLot]:
        return compute_closed_lots(transactions, portfolio_id, strict=self.config.strict)

    def get_realized_pl(self, transactions: Iterable[Transaction], portfolio_id: str | None = None) -> Decimal:
        closed = self.get_closed_lots(transactions, portfolio_id)
        realized = sum((lot.realized_pl for lot in closed), start=ZERO)
        logger.debug(
            "realized.computed",
            portfolio_id=portfolio_id or "*",
            closed_lots=len(closed),
            realized_pl=str(realized),
        )
        return realized

    def summarize(self, holdings: Iterable[Holding]) -> PortfolioSummary:
        holdings = list(holdings)
        invested = sum((h.invested_value for h in holdings), start=ZERO)
        current = sum((h.current_value for h in holdings), start=ZERO)
        unrealized = current - invested
        return PortfolioSummary(
            holding_count=len(holdings),
            invested_value=invested,
            current_value=current,
            unrealized_pl=unrealized,
            unrealized_pl_percent=percent(unrealized, invested),
        )
