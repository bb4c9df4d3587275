"""Currency conversion.

Rates come from an IRateProvider; foliotrack ships a static table provider
(configured under ``exchange_rates`` in foliotrack.yaml). Live FX sources
plug in behind the same Protocol.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Protocol

from foliotrack.services.holdings.engine import to_decimal
from foliotrack.services.holdings.models import Holding

ONE = Decimal("1")

# Holding fields expressed in the holding's currency
MONETARY_FIELDS = ("avg_buy_price", "invested_value", "current_price", "current_value", "unrealized_pl")


class RateNotAvailableError(LookupError):
    """No rate is known for a currency pair."""

    def __init__(self, from_currency: str, to_currency: str) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"No exchange rate available for {from_currency}->{to_currency}")


class IRateProvider(Protocol):
    """Source of exchange rates."""

    def get_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """
        Units of to_currency per one unit of from_currency.

        Raises:
            RateNotAvailableError: If the pair cannot be priced
        """
        ...


class StaticRateProvider:
    """
    Rate provider backed by a fixed table ``{from: {to: rate}}``.

    Resolution order for a pair:
    1. Same currency: 1
    2. Direct entry ``rates[from][to]``
    3. Inverse of ``rates[to][from]``
    4. Cross through the pivot currency (both legs resolved by 2 or 3)

    Example:
        >>> rates = StaticRateProvider({"USD": {"EUR": "0.92", "INR": "83.2"}})
        >>> rates.get_rate("EUR", "USD")  # inverse: 1 / 0.92 ~ 1.087
        >>> rates.get_rate("EUR", "INR")  # cross via USD: 83.2 / 0.92 ~ 90.43
    """

    def __init__(self, rates: Mapping[str, Mapping[str, Decimal | float | str]] | None = None, pivot: str = "USD") -> None:
        self.pivot = pivot.upper()
        self._rates: dict[str, dict[str, Decimal]] = {}
        for source, targets in (rates or {}).items():
            for target, rate in targets.items():
                value = to_decimal(rate)
                if value <= 0:
                    raise ValueError(f"Exchange rate {source}->{target} must be positive, got {value}")
                self._rates.setdefault(source.upper(), {})[target.upper()] = value

    def _single_leg(self, from_currency: str, to_currency: str) -> Decimal | None:
        if from_currency == to_currency:
            return ONE
        direct = self._rates.get(from_currency, {}).get(to_currency)
        if direct is not None:
            return direct
        opposite = self._rates.get(to_currency, {}).get(from_currency)
        if opposite is not None:
            return ONE / opposite
        return None

    def get_rate(self, from_currency: str, to_currency: str) -> Decimal:
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        rate = self._single_leg(from_currency, to_currency)
        if rate is not None:
            return rate

        to_pivot = self._single_leg(from_currency, self.pivot)
        from_pivot = self._single_leg(self.pivot, to_currency)
        if to_pivot is not None and from_pivot is not None:
            return to_pivot * from_pivot

        raise RateNotAvailableError(from_currency, to_currency)


def convert(amount: Decimal, from_currency: str, to_currency: str, provider: IRateProvider) -> Decimal:
    """Convert amount between currencies."""
    if from_currency.upper() == to_currency.upper():
        return amount
    return amount * provider.get_rate(from_currency, to_currency)


def convert_holding(holding: Holding, to_currency: str, provider: IRateProvider) -> Holding:
    """
    Copy of holding with its monetary fields expressed in to_currency.

    Quantity, percentages and the native ``currency`` label are unchanged,
    so the result can still be grouped by native currency.
    """
    rate = provider.get_rate(holding.currency, to_currency)
    if rate == ONE:
        return holding
    return holding.model_copy(update={field: getattr(holding, field) * rate for field in MONETARY_FIELDS})
