"""Holdings and realized P&L replays.

Two independent replays over the same transaction list, each with its own
cost-basis convention:

- compute_holdings: weighted-average cost, values the open positions
- compute_realized_pl: strict FIFO lot matching, totals closed trades

The two figures are reported side by side and must not be unified: a
partially sold position can show an average cost that differs from the
cost of the FIFO lots still open.

Both replays are pure. Transactions are filtered by portfolio and stably
sorted by date before replay, so input order never matters except between
transactions with identical dates.
"""

from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Union

import structlog

from foliotrack.services.holdings.exceptions import OversellError
from foliotrack.services.holdings.lot_tracker import LotTracker
from foliotrack.services.holdings.models import (
    ClosedLot,
    Holding,
    Lot,
    Position,
    Transaction,
    TransactionAction,
)

logger = structlog.get_logger(__name__)

PriceLookup = Union[Callable[[str], Union[Decimal, float, int, None]], Mapping[str, Union[Decimal, float, int]]]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """
    Convert a quoted number to Decimal without binary float noise.

    Raises:
        ValueError: If value is not a finite number (e.g. "n/a", None, NaN)
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def percent(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def as_price_lookup(price_lookup: PriceLookup | None) -> Callable[[str], Decimal | None]:
    """Normalise a mapping or callable price source into ``ticker -> Decimal | None``."""
    if price_lookup is None:
        return lambda ticker: None

    if isinstance(price_lookup, Mapping):
        prices = price_lookup

        def from_mapping(ticker: str) -> Decimal | None:
            price = prices.get(ticker)
            return None if price is None else to_decimal(price)

        return from_mapping

    source = price_lookup

    def from_callable(ticker: str) -> Decimal | None:
        price = source(ticker)
        return None if price is None else to_decimal(price)

    return from_callable


def replay_order(transactions: Iterable[Transaction], portfolio_id: str | None = None) -> list[Transaction]:
    """Transactions of one portfolio (or all, if None), oldest first; ties keep input order."""
    selected = [t for t in transactions if portfolio_id is None or t.portfolio_id == portfolio_id]
    return sorted(selected, key=lambda t: t.date)


def replay_positions(
    transactions: Iterable[Transaction],
    portfolio_id: str,
    *,
    strict: bool = False,
) -> dict[str, Position]:
    """
    Replay one portfolio's transactions into open positions.

    A SELL that takes the quantity to zero or below deletes the position;
    a negative remainder is discarded rather than kept as a short.

    Args:
        transactions: Transactions of any portfolios, in any order
        portfolio_id: Portfolio to replay
        strict: Raise OversellError when a SELL exceeds the held quantity

    Returns:
        Ticker -> open Position, in order of first appearance
    """
    positions: dict[str, Position] = {}

    for transaction in replay_order(transactions, portfolio_id):
        ticker = transaction.ticker
        position = positions.get(ticker)
        if position is None:
            position = Position(
                ticker=ticker,
                lots=LotTracker(ticker),
                currency=transaction.currency,
                exchange=transaction.exchange,
                country=transaction.country,
            )
            positions[ticker] = position

        if transaction.action == TransactionAction.BUY:
            position.apply_buy(transaction)
            continue

        if strict and transaction.quantity > position.total_quantity:
            raise OversellError(ticker, transaction.quantity, position.total_quantity)

        position.apply_sell(transaction)

        if not position.is_open:
            del positions[ticker]
            if position.total_quantity < 0:
                logger.warning(
                    "holdings.oversell_absorbed",
                    portfolio_id=portfolio_id,
                    ticker=ticker,
                    transaction_id=transaction.transaction_id,
                    excess=str(-position.total_quantity),
                )
            else:
                logger.debug("holdings.position_closed", portfolio_id=portfolio_id, ticker=ticker)

    return positions


def compute_holdings(
    transactions: Iterable[Transaction],
    portfolio_id: str,
    price_lookup: PriceLookup | None = None,
    *,
    sectors: Mapping[str, str] | None = None,
    strict: bool = False,
) -> list[Holding]:
    """
    Compute the valued open holdings of one portfolio.

    Positions are tracked at weighted-average cost. Each surviving position
    is valued at its quoted price; a ticker without a quote is valued at
    its average buy price (zero unrealized P&L) and flagged with
    ``price_is_fallback``. Allocation is computed in a second pass over the
    total current value.

    Args:
        transactions: Transactions of any portfolios, in any order
        portfolio_id: Portfolio to compute
        price_lookup: ``ticker -> price | None`` callable or ``ticker -> price`` mapping
        sectors: Optional ticker -> sector mapping ("Other" when absent)
        strict: Raise OversellError instead of absorbing oversells

    Returns:
        One Holding per ticker with quantity > 0

    Example:
        >>> holdings = compute_holdings(transactions, "growth", {"AAPL": Decimal("190")})
        >>> round(sum(h.allocation for h in holdings), 6)
        Decimal('100.000000')
    """
    lookup = as_price_lookup(price_lookup)
    sectors = sectors or {}
    positions = replay_positions(transactions, portfolio_id, strict=strict)

    valued: list[dict] = []
    for ticker, position in positions.items():
        quoted = lookup(ticker)
        if quoted is None:
            # Valued at cost so unrealized P&L is exactly zero
            current_price = position.avg_price
            current_value = position.total_cost
            unrealized_pl = ZERO
        else:
            current_price = quoted
            current_value = position.total_quantity * current_price
            unrealized_pl = current_value - position.total_cost

        valued.append(
            {
                "portfolio_id": portfolio_id,
                "ticker": ticker,
                "quantity": position.total_quantity,
                "avg_buy_price": position.avg_price,
                "invested_value": position.total_cost,
                "current_price": current_price,
                "current_value": current_value,
                "unrealized_pl": unrealized_pl,
                "unrealized_pl_percent": percent(unrealized_pl, position.total_cost),
                "currency": position.currency,
                "exchange": position.exchange,
                "country": position.country,
                "sector": sectors.get(ticker, "Other"),
                "price_is_fallback": quoted is None,
            }
        )

    total_value = sum((item["current_value"] for item in valued), start=ZERO)

    return [Holding(**item, allocation=percent(item["current_value"], total_value)) for item in valued]


def compute_closed_lots(
    transactions: Iterable[Transaction],
    portfolio_id: str | None = None,
    *,
    strict: bool = False,
) -> list[ClosedLot]:
    """
    Match every SELL against open BUY lots, oldest first.

    Lots are kept per ``(portfolio_id, ticker)``. The fee of a SELL is
    charged once, on its first matched fragment; a SELL that matches
    nothing produces no fragments and so no fee. Quantity sold beyond the
    open lots is dropped.

    Args:
        transactions: Transactions in any order
        portfolio_id: Restrict to one portfolio; None aggregates all
        strict: Raise OversellError instead of dropping unmatched quantity

    Returns:
        Closed lot fragments in replay order
    """
    trackers: dict[tuple[str, str], LotTracker] = {}
    closed: list[ClosedLot] = []

    for transaction in replay_order(transactions, portfolio_id):
        key = (transaction.portfolio_id, transaction.ticker)
        tracker = trackers.get(key)
        if tracker is None:
            tracker = trackers[key] = LotTracker(transaction.ticker)

        if transaction.action == TransactionAction.BUY:
            tracker.add_lot(Lot.from_transaction(transaction))
            continue

        matches, unmatched = tracker.match_close(transaction.quantity, strict=strict)

        for index, (lot, quantity) in enumerate(matches):
            closed.append(
                ClosedLot(
                    portfolio_id=transaction.portfolio_id,
                    ticker=transaction.ticker,
                    quantity=quantity,
                    cost_price=lot.price,
                    sell_price=transaction.trade_price,
                    fees=transaction.fees if index == 0 else ZERO,
                    opened_at=lot.opened_at,
                    closed_at=transaction.date,
                    sell_transaction_id=transaction.transaction_id,
                )
            )

        if unmatched > 0:
            logger.warning(
                "realized.oversell_dropped",
                portfolio_id=transaction.portfolio_id,
                ticker=transaction.ticker,
                transaction_id=transaction.transaction_id,
                unmatched=str(unmatched),
            )

    return closed


def compute_realized_pl(
    transactions: Iterable[Transaction],
    portfolio_id: str | None = None,
    *,
    strict: bool = False,
) -> Decimal:
    """
    Total realized P&L under FIFO matching.

    Example:
        >>> # BUY 10@100, BUY 5@120, SELL 12@110 with $2 fees
        >>> compute_realized_pl(transactions, "growth")
        Decimal('78')
    """
    closed = compute_closed_lots(transactions, portfolio_id, strict=strict)
    return sum((lot.realized_pl for lot in closed), start=ZERO)
