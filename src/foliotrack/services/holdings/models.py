"""Data models for the holdings engine.

Defines all core entities for holdings accounting:
- Transaction: Immutable BUY/SELL record (input)
- Lot: One unconsumed purchase tranche
- Position: Working per-ticker state during replay
- Holding: Valued open position (output)
- ClosedLot: One FIFO match produced by a SELL (realized P&L)
- PortfolioSummary: Totals over a holding list
- EngineConfig: Engine policy
"""

from datetime import date as date_type
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from foliotrack.services.holdings.lot_tracker import LotTracker


def ensure_utc(v: Any) -> datetime:
    """Parse and normalise a timestamp to timezone-aware UTC.

    Accepts ISO strings (``Z`` suffix allowed), dates and datetimes. Naive
    values are taken to be UTC.
    """
    if isinstance(v, str):
        dt = datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
    elif isinstance(v, datetime):
        dt = v
    elif isinstance(v, date_type):
        dt = datetime(v.year, v.month, v.day)
    else:
        raise ValueError(f"Cannot parse datetime from {type(v).__name__}: {v}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class TransactionAction(str, Enum):
    """Direction of a transaction."""

    BUY = "BUY"
    SELL = "SELL"


class Transaction(BaseModel):
    """
    A single BUY or SELL of one ticker in one portfolio.

    Transactions are owned by the storage layer; the engine only reads
    them. Field validation here is the upstream check the engine relies
    on: quantities and prices are positive and fees non-negative.

    Attributes:
        transaction_id: Unique identifier
        portfolio_id: Owning portfolio
        date: When the trade happened (UTC)
        action: BUY or SELL
        ticker: Instrument identifier
        quantity: Units traded (positive)
        trade_price: Price per unit in the transaction currency (positive)
        fees: Transaction cost (realized P&L only, never cost basis)
        currency: Currency of trade_price
        exchange: Listing exchange (descriptive)
        country: Listing country (descriptive)
        notes: Free text
        tag: Free-form label

    Example:
        >>> tx = Transaction(
        ...     portfolio_id="growth",
        ...     date="2024-01-15",
        ...     action="BUY",
        ...     ticker="AAPL",
        ...     quantity=Decimal("10"),
        ...     trade_price=Decimal("185.50"),
        ... )
    """

    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    portfolio_id: str
    date: datetime
    action: TransactionAction
    ticker: str
    quantity: Decimal
    trade_price: Decimal
    fees: Decimal = Decimal("0")
    currency: str = "USD"
    exchange: str = ""
    country: str = ""
    notes: str | None = None
    tag: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> datetime:
        """Normalise trade date to UTC."""
        return ensure_utc(v)

    @field_validator("action", mode="before")
    @classmethod
    def validate_action(cls, v: Any) -> Any:
        """Accept 'buy'/'sell' in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("ticker", "currency")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Tickers and currency codes are upper-case and non-empty."""
        v = v.strip().upper()
        if not v:
            raise ValueError("Value cannot be empty")
        return v

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: Decimal) -> Decimal:
        """Validate quantity is positive."""
        if v <= 0:
            raise ValueError(f"Quantity must be positive, got {v}")
        return v

    @field_validator("trade_price")
    @classmethod
    def validate_trade_price(cls, v: Decimal) -> Decimal:
        """Validate trade price is positive."""
        if v <= 0:
            raise ValueError(f"Trade price must be positive, got {v}")
        return v

    @field_validator("fees")
    @classmethod
    def validate_fees(cls, v: Decimal) -> Decimal:
        """Validate fees are non-negative."""
        if v < 0:
            raise ValueError(f"Fees cannot be negative, got {v}")
        return v

    model_config = ConfigDict(frozen=True)  # Immutable after creation


class Lot(BaseModel):
    """
    One unconsumed purchase tranche.

    Attributes:
        quantity: Units still open (always positive)
        price: Cost per unit
        opened_at: Date of the BUY that created the lot
        transaction_id: BUY transaction that created the lot
    """

    quantity: Decimal
    price: Decimal
    opened_at: datetime
    transaction_id: str

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: Decimal) -> Decimal:
        """Empty lots are never kept."""
        if v <= 0:
            raise ValueError(f"Lot quantity must be positive, got {v}")
        return v

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "Lot":
        """Create the lot opened by a BUY."""
        return cls(
            quantity=transaction.quantity,
            price=transaction.trade_price,
            opened_at=transaction.date,
            transaction_id=transaction.transaction_id,
        )

    model_config = ConfigDict(frozen=True)


class Position(BaseModel):
    """
    Working state for one ticker during a holdings replay.

    Cost is tracked with the weighted-average method: a BUY adds its cost
    and recomputes avg_price, a SELL removes ``quantity * avg_price`` so the
    average is unchanged. Lots are consumed FIFO alongside so the open
    tranches stay visible.

    Attributes:
        ticker: Instrument identifier
        lots: Open purchase tranches, oldest first
        total_quantity: Units held
        total_cost: Weighted-average cost basis of the units held
        avg_price: total_cost / total_quantity as of the last BUY
        currency, exchange, country: Metadata from the first transaction
    """

    ticker: str
    lots: LotTracker = Field(default_factory=LotTracker)
    total_quantity: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    avg_price: Decimal = Decimal("0")

    currency: str = "USD"
    exchange: str = ""
    country: str = ""

    def apply_buy(self, transaction: Transaction) -> None:
        """Open a new lot and re-average the cost."""
        self.lots.add_lot(Lot.from_transaction(transaction))
        self.total_quantity += transaction.quantity
        self.total_cost += transaction.quantity * transaction.trade_price
        self.avg_price = self.total_cost / self.total_quantity

    def apply_sell(self, transaction: Transaction) -> Decimal:
        """
        Reduce the position at average cost.

        Returns:
            Quantity that could not be matched against open lots
        """
        self.total_quantity -= transaction.quantity
        self.total_cost -= transaction.quantity * self.avg_price
        _, unmatched = self.lots.match_close(transaction.quantity)
        return unmatched

    @property
    def is_open(self) -> bool:
        """True while the position still holds units."""
        return self.total_quantity > 0

    model_config = ConfigDict(arbitrary_types_allowed=True)  # NOT frozen - mutable


class Holding(BaseModel):
    """
    Valued open position, one per ticker with quantity > 0.

    Attributes:
        portfolio_id: Owning portfolio
        ticker: Instrument identifier
        quantity: Units held
        avg_buy_price: Weighted-average cost per unit
        invested_value: Cost basis of the units held
        current_price: Quoted price, or avg_buy_price when no quote exists
        current_value: quantity * current_price
        unrealized_pl: current_value - invested_value
        unrealized_pl_percent: unrealized_pl / invested_value * 100 (0 if nothing invested)
        allocation: Share of the portfolio's total current value, in percent
        currency: Native currency of the prices above
        exchange, country, sector: Descriptive metadata
        price_is_fallback: True when current_price fell back to avg_buy_price
    """

    portfolio_id: str
    ticker: str
    quantity: Decimal
    avg_buy_price: Decimal
    invested_value: Decimal
    current_price: Decimal
    current_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    allocation: Decimal = Decimal("0")

    currency: str = "USD"
    exchange: str = ""
    country: str = ""
    sector: str = "Other"
    price_is_fallback: bool = False

    model_config = ConfigDict(frozen=True)


class ClosedLot(BaseModel):
    """
    A lot (or part of one) closed by a SELL under FIFO matching.

    The whole fee of a SELL is carried by its first fragment; any further
    fragments of the same SELL have zero fees.

    Attributes:
        portfolio_id: Owning portfolio
        ticker: Instrument identifier
        quantity: Units closed
        cost_price: Purchase price of the matched lot
        sell_price: Trade price of the SELL
        fees: Share of the SELL fee carried by this fragment
        opened_at: Date of the matched BUY
        closed_at: Date of the SELL
        sell_transaction_id: SELL that closed the lot
    """

    portfolio_id: str
    ticker: str
    quantity: Decimal
    cost_price: Decimal
    sell_price: Decimal
    fees: Decimal = Decimal("0")
    opened_at: datetime
    closed_at: datetime
    sell_transaction_id: str

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.cost_price

    @property
    def proceeds(self) -> Decimal:
        return self.quantity * self.sell_price

    @property
    def realized_pl(self) -> Decimal:
        """Gain or loss locked in by this fragment, net of its fees."""
        return self.proceeds - self.cost_basis - self.fees

    model_config = ConfigDict(frozen=True)


class PortfolioSummary(BaseModel):
    """Totals over one portfolio's holdings."""

    holding_count: int
    invested_value: Decimal
    current_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal

    model_config = ConfigDict(frozen=True)


class EngineConfig(BaseModel):
    """
    Holdings engine policy.

    Attributes:
        strict: Raise OversellError when a SELL exceeds the tracked
            quantity instead of absorbing it (position deleted, unmatched
            remainder dropped from realized P&L).
    """

    strict: bool = False

    model_config = ConfigDict(frozen=True)
