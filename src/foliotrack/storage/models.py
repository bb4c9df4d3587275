"""Record types persisted in a book and a market snapshot."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from foliotrack.services.holdings.engine import to_decimal
from foliotrack.services.holdings.models import Transaction

CURRENT_BOOK_VERSION = 1


class Portfolio(BaseModel):
    """
    A named portfolio with its reporting currency and cash balance.

    Attributes:
        portfolio_id: Identifier referenced by transactions
        name: Display name
        currency: Currency of the cash balance and realized P&L
        country: Home country (descriptive)
        cash: Uninvested cash, in currency
        description: Free text
    """

    portfolio_id: str
    name: str
    currency: str = "USD"
    country: str = ""
    cash: Decimal = Decimal("0")
    description: str | None = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.strip().upper()

    model_config = ConfigDict(frozen=True)


class Book(BaseModel):
    """
    Portfolios and their transactions, as stored in one book file.

    Example:
        >>> book = load_book(Path("data/book.json"))
        >>> for portfolio in book.portfolios:
        ...     print(portfolio.name, len(book.transactions_for(portfolio.portfolio_id)))
    """

    schema_version: int = CURRENT_BOOK_VERSION
    portfolios: list[Portfolio] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)

    @model_validator(mode="after")
    def _add_missing_portfolios(self) -> "Book":
        """Every portfolio referenced by a transaction gets a Portfolio record."""
        known = {p.portfolio_id for p in self.portfolios}
        for transaction in self.transactions:
            if transaction.portfolio_id not in known:
                known.add(transaction.portfolio_id)
                self.portfolios.append(
                    Portfolio(
                        portfolio_id=transaction.portfolio_id,
                        name=transaction.portfolio_id,
                        currency=transaction.currency,
                        country=transaction.country,
                    )
                )
        return self

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None:
        return next((p for p in self.portfolios if p.portfolio_id == portfolio_id), None)

    def portfolio_ids(self) -> list[str]:
        return [p.portfolio_id for p in self.portfolios]

    def transactions_for(self, portfolio_id: str) -> list[Transaction]:
        return [t for t in self.transactions if t.portfolio_id == portfolio_id]

    def tickers(self) -> list[str]:
        """Distinct tickers across all transactions, sorted."""
        return sorted({t.ticker for t in self.transactions})


class MarketSnapshot(BaseModel):
    """
    Prices and sector labels loaded from a market file.

    Example market.yaml:
        prices:
          AAPL: 190.12
          INFY.NS: 1520.5
        sectors:
          AAPL: Technology
    """

    prices: dict[str, Decimal] = Field(default_factory=dict)
    sectors: dict[str, str] = Field(default_factory=dict)

    @field_validator("prices", mode="before")
    @classmethod
    def normalize_prices(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(ticker).strip().upper(): to_decimal(price) for ticker, price in v.items()}
        return v

    @field_validator("sectors", mode="before")
    @classmethod
    def normalize_sectors(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(ticker).strip().upper(): str(sector) for ticker, sector in v.items()}
        return v

    model_config = ConfigDict(frozen=True)
