"""Unit tests for the consolidated dashboard."""

from decimal import Decimal

import pytest

from foliotrack.services.cache import TTLCache
from foliotrack.services.currency import RateNotAvailableError, StaticRateProvider
from foliotrack.services.dashboard import DashboardService, allocate, top_movers
from foliotrack.services.holdings import HoldingsService
from foliotrack.storage import Portfolio


@pytest.fixture
def portfolios() -> list[Portfolio]:
    return [
        Portfolio(portfolio_id="growth", name="Growth", currency="USD", cash=Decimal("500")),
        Portfolio(portfolio_id="india", name="India", currency="INR", cash=Decimal("10000")),
    ]


@pytest.fixture
def transactions(make_tx):
    return [
        make_tx("BUY", "AAPL", "10", "100", date="2024-01-02", portfolio_id="growth", country="US"),
        make_tx("SELL", "AAPL", "5", "120", date="2024-02-01", portfolio_id="growth", fees="2", country="US"),
        make_tx("BUY", "MSFT", "2", "400", date="2024-03-05", portfolio_id="growth", country="US"),
        make_tx(
            "BUY", "INFY.NS", "20", "1500", date="2024-01-10", portfolio_id="india", currency="INR", country="IN"
        ),
        make_tx(
            "SELL", "INFY.NS", "4", "1700", date="2024-04-10", portfolio_id="india", currency="INR", country="IN"
        ),
    ]


@pytest.fixture
def prices() -> dict[str, Decimal]:
    return {"AAPL": Decimal("130"), "MSFT": Decimal("380"), "INFY.NS": Decimal("1600")}


@pytest.fixture
def service() -> DashboardService:
    return DashboardService(HoldingsService(), StaticRateProvider({"USD": {"INR": "80"}}))


class TestDashboardTotals:
    def test_totals_in_display_currency(self, service, portfolios, transactions, prices):
        summary = service.build(portfolios, transactions, prices, currency="usd")

        # growth: AAPL 5 @ cost 100 -> 650, MSFT 2 @ 400 -> 760
        # india: INFY 16 @ 1500 INR -> 1600 INR, at 80 INR/USD
        assert summary.currency == "USD"
        assert summary.total_invested == Decimal("500") + Decimal("800") + Decimal("300")
        assert summary.total_current_value == Decimal("650") + Decimal("760") + Decimal("320")
        assert summary.total_unrealized_pl == Decimal("130")
        assert summary.total_cash == Decimal("625")
        # growth 5 * 20 - 2, india 4 * 200 INR
        assert summary.total_realized_pl == Decimal("98") + Decimal("10")
        assert summary.total_pl == Decimal("238")
        assert summary.total_pl_percent == Decimal("238") / Decimal("1600") * 100

    def test_per_portfolio_breakdown(self, service, portfolios, transactions, prices):
        summary = service.build(portfolios, transactions, prices)

        india = next(p for p in summary.portfolios if p.portfolio_id == "india")
        assert india.currency == "INR"
        assert india.holding_count == 1
        assert india.cash == Decimal("125")
        assert india.realized_pl == Decimal("10")
        assert india.current_value == Decimal("320")

    def test_inr_display_currency(self, service, portfolios, transactions, prices):
        summary = service.build(portfolios, transactions, prices, currency="INR")

        assert summary.total_cash == Decimal("500") * 80 + Decimal("10000")

    def test_missing_rate_raises(self, portfolios, transactions, prices):
        service = DashboardService(HoldingsService(), StaticRateProvider())

        with pytest.raises(RateNotAvailableError):
            service.build(portfolios, transactions, prices)

    def test_no_portfolios(self, service):
        summary = service.build([], [])

        assert summary.total_pl == Decimal("0")
        assert summary.total_pl_percent == Decimal("0")
        assert summary.portfolio_allocations == []


class TestAllocations:
    def test_by_portfolio(self, service, portfolios, transactions, prices):
        summary = service.build(portfolios, transactions, prices)

        assert [item.name for item in summary.portfolio_allocations] == ["Growth", "India"]
        assert sum(item.percentage for item in summary.portfolio_allocations) == pytest.approx(Decimal("100"))

    def test_by_sector_country_and_currency(self, service, portfolios, transactions, prices):
        sectors = {"AAPL": "Technology", "MSFT": "Technology"}

        summary = service.build(portfolios, transactions, prices, sectors=sectors)

        assert {i.name: i.value for i in summary.sector_allocations} == {
            "Technology": Decimal("1410"),
            "Other": Decimal("320"),
        }
        assert {i.name: i.value for i in summary.country_allocations} == {
            "US": Decimal("1410"),
            "IN": Decimal("320"),
        }
        # Grouped by native currency, valued in the display currency
        assert {i.name: i.value for i in summary.currency_allocations} == {
            "USD": Decimal("1410"),
            "INR": Decimal("320"),
        }

    def test_allocate_helper(self):
        items = allocate([("a", Decimal("1")), ("b", Decimal("3")), ("a", Decimal("4"))])

        assert [(i.name, i.value, i.percentage) for i in items] == [
            ("a", Decimal("5"), Decimal("62.5")),
            ("b", Decimal("3"), Decimal("37.5")),
        ]

    def test_allocate_zero_total(self):
        (item,) = allocate([("a", Decimal("0"))])

        assert item.percentage == Decimal("0")


class TestTopLists:
    def test_gainers_and_losers(self, service, portfolios, transactions, prices):
        summary = service.build(portfolios, transactions, prices)

        assert [h.ticker for h in summary.top_gainers] == ["AAPL", "INFY.NS"]
        assert [h.ticker for h in summary.top_losers] == ["MSFT"]
        assert [h.ticker for h in summary.top_holdings] == ["MSFT", "AAPL", "INFY.NS"]

    def test_top_movers_limit(self, service, portfolios, transactions, prices):
        holdings = HoldingsService().get_holdings(transactions, "growth", prices)

        gainers, losers = top_movers(holdings, limit=1)

        assert len(gainers) == 1
        assert len(losers) == 1


class TestDashboardCache:
    def test_cached_until_invalidated(self, portfolios, transactions, prices):
        cache = TTLCache(300)
        service = DashboardService(HoldingsService(), StaticRateProvider({"USD": {"INR": "80"}}), cache=cache)

        first = service.build(portfolios, transactions, prices)
        second = service.build(portfolios, transactions, {"AAPL": Decimal("1")})

        assert second is first

        assert service.invalidate() == 1
        third = service.build(portfolios, transactions, {"AAPL": Decimal("1")})
        assert third.total_current_value != first.total_current_value

    def test_new_transactions_hidden_until_invalidated(self, portfolios, transactions, prices, make_tx):
        service = DashboardService(
            HoldingsService(), StaticRateProvider({"USD": {"INR": "80"}}), cache=TTLCache(300)
        )
        first = service.build(portfolios, transactions, prices)
        more = [*transactions, make_tx("BUY", "AAPL", "5", "100", date="2024-05-01", portfolio_id="growth")]

        assert service.build(portfolios, more, prices) is first

        service.invalidate()
        assert service.build(portfolios, more, prices).total_invested == first.total_invested + 500

    def test_force_refresh(self, portfolios, transactions, prices):
        service = DashboardService(
            HoldingsService(), StaticRateProvider({"USD": {"INR": "80"}}), cache=TTLCache(300)
        )

        first = service.build(portfolios, transactions, prices)
        refreshed = service.build(portfolios, transactions, prices, force_refresh=True)

        assert refreshed is not first
        assert refreshed.total_pl == first.total_pl

    def test_key_includes_currency(self, portfolios, transactions, prices):
        service = DashboardService(
            HoldingsService(), StaticRateProvider({"USD": {"INR": "80"}}), cache=TTLCache(300)
        )

        usd = service.build(portfolios, transactions, prices, currency="USD")
        inr = service.build(portfolios, transactions, prices, currency="INR")

        assert usd.currency == "USD"
        assert inr.currency == "INR"

    def test_invalidate_without_cache(self, service):
        assert service.invalidate() == 0
