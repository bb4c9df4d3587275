"""Dashboard service: multi-portfolio, multi-currency aggregation."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

import structlog

from foliotrack.services.cache import TTLCache
from foliotrack.services.currency.rates import IRateProvider, convert, convert_holding
from foliotrack.services.dashboard.models import AllocationItem, DashboardSummary, PortfolioBreakdown
from foliotrack.services.holdings.engine import ZERO, PriceLookup, percent
from foliotrack.services.holdings.interface import IHoldingsService
from foliotrack.services.holdings.models import Holding, Transaction
from foliotrack.storage.models import Portfolio

logger = structlog.get_logger(__name__)

TOP_HOLDINGS = 10
TOP_MOVERS = 5


def allocate(values: Iterable[tuple[str, Decimal]]) -> list[AllocationItem]:
    """
    Group (name, value) pairs by name into percentage slices.

    Slices are sorted by value, largest first; percentages are 0 when the
    total is 0.
    """
    grouped: dict[str, Decimal] = {}
    for name, value in values:
        grouped[name] = grouped.get(name, ZERO) + value

    total = sum(grouped.values(), start=ZERO)
    items = [AllocationItem(name=name, value=value, percentage=percent(value, total)) for name, value in grouped.items()]
    return sorted(items, key=lambda item: item.value, reverse=True)


def top_movers(holdings: Sequence[Holding], limit: int = TOP_MOVERS) -> tuple[list[Holding], list[Holding]]:
    """(gainers, losers) by unrealized P&L percent; flat holdings are in neither."""
    gainers = sorted(
        (h for h in holdings if h.unrealized_pl_percent > 0),
        key=lambda h: h.unrealized_pl_percent,
        reverse=True,
    )
    losers = sorted((h for h in holdings if h.unrealized_pl_percent < 0), key=lambda h: h.unrealized_pl_percent)
    return gainers[:limit], losers[:limit]


class DashboardService:
    """
    Builds the consolidated dashboard.

    Holdings come from the injected holdings service and are converted into
    the display currency by the injected rate provider: holding values by
    the holding's own currency, cash and realized P&L by the portfolio's
    currency. When a cache is injected, summaries are cached per display
    currency and portfolio set.

    Example:
        >>> service = DashboardService(HoldingsService(), StaticRateProvider(rates), TTLCache(300))
        >>> summary = service.build(book.portfolios, book.transactions, quotes.get_price, currency="EUR")
        >>> summary.total_pl
    """

    def __init__(
        self,
        holdings_service: IHoldingsService,
        rate_provider: IRateProvider,
        cache: TTLCache[DashboardSummary] | None = None,
    ) -> None:
        self.holdings_service = holdings_service
        self.rate_provider = rate_provider
        self.cache = cache

    def build(
        self,
        portfolios: Sequence[Portfolio],
        transactions: Sequence[Transaction],
        price_lookup: PriceLookup | None = None,
        currency: str = "USD",
        sectors: Mapping[str, str] | None = None,
        force_refresh: bool = False,
    ) -> DashboardSummary:
        """
        Build (or fetch from cache) the dashboard summary.

        The cache key is the display currency and the portfolio ids only.
        A cached summary does not see new transactions or prices: call
        invalidate() after writing to the book or refreshing quotes, or
        pass force_refresh=True.

        Args:
            portfolios: Portfolios to include
            transactions: Transactions of those portfolios (others are ignored)
            price_lookup: Current prices in native currencies
            currency: Display currency
            sectors: Optional ticker -> sector mapping
            force_refresh: Bypass and replace any cached summary

        Raises:
            RateNotAvailableError: If a needed currency pair cannot be priced
            OversellError: If the holdings service runs in strict mode and a SELL oversells
        """
        currency = currency.upper()

        def compute() -> DashboardSummary:
            return self._compute(portfolios, transactions, price_lookup, currency, sectors)

        if self.cache is None:
            return compute()

        key = (currency, tuple(sorted(p.portfolio_id for p in portfolios)))
        return self.cache.get_or_set(key, compute, force_refresh=force_refresh)

    def invalidate(self) -> int:
        """Drop every cached summary. Returns entries dropped."""
        if self.cache is None:
            return 0
        return self.cache.clear()

    def _compute(
        self,
        portfolios: Sequence[Portfolio],
        transactions: Sequence[Transaction],
        price_lookup: PriceLookup | None,
        currency: str,
        sectors: Mapping[str, str] | None,
    ) -> DashboardSummary:
        all_holdings: list[Holding] = []
        breakdowns: list[PortfolioBreakdown] = []

        for portfolio in portfolios:
            holdings = self.holdings_service.get_holdings(
                transactions, portfolio.portfolio_id, price_lookup, sectors
            )
            converted = [convert_holding(h, currency, self.rate_provider) for h in holdings]
            summary = self.holdings_service.summarize(converted)

            realized = self.holdings_service.get_realized_pl(transactions, portfolio.portfolio_id)

            breakdowns.append(
                PortfolioBreakdown(
                    portfolio_id=portfolio.portfolio_id,
                    name=portfolio.name,
                    currency=portfolio.currency,
                    invested_value=summary.invested_value,
                    current_value=summary.current_value,
                    cash=convert(portfolio.cash, portfolio.currency, currency, self.rate_provider),
                    unrealized_pl=summary.unrealized_pl,
                    realized_pl=convert(realized, portfolio.currency, currency, self.rate_provider),
                    holding_count=summary.holding_count,
                )
            )
            all_holdings.extend(converted)

        total_invested = sum((b.invested_value for b in breakdowns), start=ZERO)
        total_current = sum((b.current_value for b in breakdowns), start=ZERO)
        total_unrealized = sum((b.unrealized_pl for b in breakdowns), start=ZERO)
        total_realized = sum((b.realized_pl for b in breakdowns), start=ZERO)
        total_pl = total_unrealized + total_realized

        gainers, losers = top_movers(all_holdings)

        dashboard = DashboardSummary(
            currency=currency,
            total_invested=total_invested,
            total_current_value=total_current,
            total_cash=sum((b.cash for b in breakdowns), start=ZERO),
            total_unrealized_pl=total_unrealized,
            total_realized_pl=total_realized,
            total_pl=total_pl,
            total_pl_percent=percent(total_pl, total_invested),
            portfolios=breakdowns,
            portfolio_allocations=allocate((b.name, b.current_value) for b in breakdowns),
            sector_allocations=allocate((h.sector, h.current_value) for h in all_holdings),
            country_allocations=allocate((h.country or "Unknown", h.current_value) for h in all_holdings),
            currency_allocations=allocate((h.currency, h.current_value) for h in all_holdings),
            top_holdings=sorted(all_holdings, key=lambda h: h.current_value, reverse=True)[:TOP_HOLDINGS],
            top_gainers=gainers,
            top_losers=losers,
        )

        logger.info(
            "dashboard.built",
            currency=currency,
            portfolios=len(breakdowns),
            holdings=len(all_holdings),
            total_pl=str(total_pl),
        )
        return dashboard
