"""Dashboard command - thin CLI orchestration layer."""

import sys
from pathlib import Path

import click
from rich.console import Console

from foliotrack.cli.commands.common import BOOK_ARGUMENT, MARKET_OPTION, build_quotes, current_config
from foliotrack.cli.ui.formatters import (
    create_allocation_table,
    create_dashboard_totals_table,
    create_movers_table,
)
from foliotrack.services.cache import TTLCache
from foliotrack.services.currency import StaticRateProvider
from foliotrack.services.dashboard import DashboardService
from foliotrack.services.holdings import HoldingsService
from foliotrack.storage import load_book


@click.command("dashboard")
@BOOK_ARGUMENT
@MARKET_OPTION
@click.option("--currency", "-c", default=None, help="Display currency (default from config: USD)")
def dashboard_command(book_path: Path, market_path: Path | None, currency: str | None):
    """
    Show the consolidated dashboard across all portfolios.

    Values are converted to the display currency with the exchange_rates
    table from foliotrack.yaml.

    Example:
        foliotrack dashboard book.json --market market.yaml --currency EUR
    """
    console = Console()
    config = current_config()
    currency = (currency or config.display_currency).upper()

    try:
        book = load_book(book_path)
        quotes, sectors = build_quotes(config, market_path)
        service = DashboardService(
            HoldingsService(config.engine),
            StaticRateProvider(config.exchange_rates),
            cache=TTLCache(config.cache.dashboard_ttl_seconds),
        )
        summary = service.build(book.portfolios, book.transactions, quotes.get_price, currency, sectors)
    except (FileNotFoundError, LookupError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(create_dashboard_totals_table(summary))

    for title, items in (
        ("Portfolio Allocation", summary.portfolio_allocations),
        ("Sector Allocation", summary.sector_allocations),
        ("Country Allocation", summary.country_allocations),
        ("Currency Allocation", summary.currency_allocations),
    ):
        if items:
            console.print(create_allocation_table(title, items, summary.currency))

    if summary.top_gainers:
        console.print(create_movers_table("Top Gainers", summary.top_gainers))
    if summary.top_losers:
        console.print(create_movers_table("Top Losers", summary.top_losers))
