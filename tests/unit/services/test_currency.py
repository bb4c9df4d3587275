"""Unit tests for currency rates and conversion."""

from decimal import Decimal

import pytest

from foliotrack.services.currency import RateNotAvailableError, StaticRateProvider, convert, convert_holding
from foliotrack.services.holdings.models import Holding


@pytest.fixture
def rates() -> StaticRateProvider:
    return StaticRateProvider({"USD": {"EUR": "0.8", "INR": "80"}})


class TestStaticRateProvider:
    def test_identity(self, rates):
        assert rates.get_rate("GBP", "gbp") == Decimal("1")

    def test_direct(self, rates):
        assert rates.get_rate("usd", "INR") == Decimal("80")

    def test_inverse(self, rates):
        assert rates.get_rate("EUR", "USD") == Decimal("1.25")

    def test_cross_via_pivot(self, rates):
        assert rates.get_rate("EUR", "INR") == Decimal("100")

    def test_unknown_pair_raises(self, rates):
        with pytest.raises(RateNotAvailableError) as exc_info:
            rates.get_rate("USD", "JPY")

        assert exc_info.value.from_currency == "USD"
        assert exc_info.value.to_currency == "JPY"
        assert isinstance(exc_info.value, LookupError)

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError, match="must be positive"):
            StaticRateProvider({"USD": {"EUR": 0}})


class TestConvert:
    def test_convert(self, rates):
        assert convert(Decimal("10"), "USD", "INR", rates) == Decimal("800")

    def test_same_currency_untouched(self):
        # No rates needed for an identity conversion
        assert convert(Decimal("10"), "JPY", "jpy", StaticRateProvider()) == Decimal("10")

    def test_convert_holding_keeps_native_label(self, rates):
        holding = Holding(
            portfolio_id="p1",
            ticker="INFY.NS",
            quantity=Decimal("2"),
            avg_buy_price=Decimal("800"),
            invested_value=Decimal("1600"),
            current_price=Decimal("1000"),
            current_value=Decimal("2000"),
            unrealized_pl=Decimal("400"),
            unrealized_pl_percent=Decimal("25"),
            allocation=Decimal("100"),
            currency="INR",
        )

        converted = convert_holding(holding, "USD", rates)

        assert converted.currency == "INR"
        assert converted.quantity == Decimal("2")
        assert converted.avg_buy_price == Decimal("10")
        assert converted.invested_value == Decimal("20")
        assert converted.current_price == Decimal("12.5")
        assert converted.current_value == Decimal("25")
        assert converted.unrealized_pl == Decimal("5")
        assert converted.unrealized_pl_percent == Decimal("25")
        assert converted.allocation == Decimal("100")
