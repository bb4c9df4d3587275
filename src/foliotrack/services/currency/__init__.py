"""Currency rates and conversion helpers."""

from foliotrack.services.currency.rates import (
    IRateProvider,
    RateNotAvailableError,
    StaticRateProvider,
    convert,
    convert_holding,
)

__all__ = [
    "IRateProvider",
    "StaticRateProvider",
    "RateNotAvailableError",
    "convert",
    "convert_holding",
]
