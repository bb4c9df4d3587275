"""Data models for the consolidated dashboard."""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from foliotrack.services.holdings.models import Holding


class AllocationItem(BaseModel):
    """One slice of an allocation breakdown (value in the display currency)."""

    name: str
    value: Decimal
    percentage: Decimal

    model_config = ConfigDict(frozen=True)


class PortfolioBreakdown(BaseModel):
    """Per-portfolio totals, converted to the display currency."""

    portfolio_id: str
    name: str
    currency: str
    invested_value: Decimal
    current_value: Decimal
    cash: Decimal
    unrealized_pl: Decimal
    realized_pl: Decimal
    holding_count: int

    model_config = ConfigDict(frozen=True)


class DashboardSummary(BaseModel):
    """
    Consolidated view over several portfolios in one display currency.

    Attributes:
        currency: Display currency of every monetary field
        total_invested: Cost basis of all open holdings
        total_current_value: Market value of all open holdings
        total_cash: Cash across portfolios
        total_unrealized_pl: total_current_value - total_invested
        total_realized_pl: FIFO realized P&L across portfolios
        total_pl: unrealized + realized
        total_pl_percent: total_pl / total_invested * 100 (0 if nothing invested)
        portfolios: Per-portfolio breakdown
        portfolio_allocations, sector_allocations, country_allocations,
        currency_allocations: Breakdowns of total_current_value
        top_holdings: Up to 10 largest holdings by current value
        top_gainers: Up to 5 holdings with the highest positive unrealized P&L %
        top_losers: Up to 5 holdings with the most negative unrealized P&L %
        generated_at: When the summary was built (UTC)
    """

    currency: str
    total_invested: Decimal
    total_current_value: Decimal
    total_cash: Decimal
    total_unrealized_pl: Decimal
    total_realized_pl: Decimal
    total_pl: Decimal
    total_pl_percent: Decimal

    portfolios: list[PortfolioBreakdown] = Field(default_factory=list)
    portfolio_allocations: list[AllocationItem] = Field(default_factory=list)
    sector_allocations: list[AllocationItem] = Field(default_factory=list)
    country_allocations: list[AllocationItem] = Field(default_factory=list)
    currency_allocations: list[AllocationItem] = Field(default_factory=list)

    top_holdings: list[Holding] = Field(default_factory=list)
    top_gainers: list[Holding] = Field(default_factory=list)
    top_losers: list[Holding] = Field(default_factory=list)

    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)
