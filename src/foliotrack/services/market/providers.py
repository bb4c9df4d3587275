"""Quote providers.

A quote provider answers "what is the current price of this ticker?" with
a Decimal, or None when it has no price. Real market-data sources sit
behind the same Protocol; foliotrack ships an in-memory provider and the
fallback chain that tries several providers in order.
"""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Protocol

import structlog

from foliotrack.services.cache import TTLCache
from foliotrack.services.holdings.engine import to_decimal

logger = structlog.get_logger(__name__)


class QuoteProviderError(RuntimeError):
    """A provider failed to answer (network error, bad response, rate limit)."""


class IQuoteProvider(Protocol):
    """Source of current prices, in each ticker's native currency."""

    name: str

    def get_price(self, ticker: str) -> Decimal | None:
        """
        Current price for ticker, or None if unknown.

        Raises:
            QuoteProviderError: If the provider could not be queried
        """
        ...


class StaticQuoteProvider:
    """
    Provider backed by a fixed ``ticker -> price`` mapping.

    Used for prices loaded from a market snapshot file and in tests.

    Example:
        >>> provider = StaticQuoteProvider({"aapl": 190.12})
        >>> provider.get_price("AAPL")
        Decimal('190.12')
    """

    def __init__(self, prices: Mapping[str, Decimal | float | int | str], name: str = "static") -> None:
        self.name = name
        self._prices = {ticker.strip().upper(): to_decimal(price) for ticker, price in prices.items()}

    def get_price(self, ticker: str) -> Decimal | None:
        return self._prices.get(ticker.strip().upper())

    def tickers(self) -> list[str]:
        return sorted(self._prices)


class FallbackQuoteProvider:
    """
    Chain of providers consulted in order, with an optional TTL cache.

    Lookup order: cache, then each provider until one returns a price. A
    provider raising QuoteProviderError is logged and skipped. When every
    provider misses the result is None, which the holdings engine turns
    into an average-cost valuation. Misses are not cached.

    Args:
        providers: Providers in priority order
        cache: Cache for resolved prices (owned by the caller)

    Example:
        >>> chain = FallbackQuoteProvider([primary, StaticQuoteProvider(snapshot)], cache=TTLCache(1800))
        >>> holdings = compute_holdings(transactions, "growth", chain.get_price)
    """

    name = "fallback"

    def __init__(self, providers: Sequence[IQuoteProvider], cache: TTLCache[Decimal] | None = None) -> None:
        if not providers:
            raise ValueError("FallbackQuoteProvider needs at least one provider")
        self.providers = list(providers)
        self.cache = cache

    def get_price(self, ticker: str) -> Decimal | None:
        ticker = ticker.strip().upper()

        if self.cache is not None:
            cached = self.cache.get(ticker)
            if cached is not None:
                return cached

        for provider in self.providers:
            try:
                price = provider.get_price(ticker)
            except QuoteProviderError as e:
                logger.warning("quotes.provider_failed", provider=provider.name, ticker=ticker, error=str(e))
                continue

            if price is not None:
                logger.debug("quotes.resolved", provider=provider.name, ticker=ticker, price=str(price))
                if self.cache is not None:
                    self.cache.set(ticker, price)
                return price

        logger.debug("quotes.unavailable", ticker=ticker)
        return None

    def lookup(self, tickers: Iterable[str]) -> dict[str, Decimal]:
        """Resolve many tickers; tickers without a price are left out."""
        prices: dict[str, Decimal] = {}
        for ticker in tickers:
            price = self.get_price(ticker)
            if price is not None:
                prices[ticker.strip().upper()] = price
        return prices

    def refresh(self) -> int:
        """Drop cached prices so the next lookups hit the providers. Returns entries dropped."""
        if self.cache is None:
            return 0
        return self.cache.clear()
