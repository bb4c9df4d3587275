"""Market data: quote provider Protocol, static provider and fallback chain."""

from foliotrack.services.market.providers import (
    FallbackQuoteProvider,
    IQuoteProvider,
    QuoteProviderError,
    StaticQuoteProvider,
)

__all__ = [
    "IQuoteProvider",
    "StaticQuoteProvider",
    "FallbackQuoteProvider",
    "QuoteProviderError",
]
