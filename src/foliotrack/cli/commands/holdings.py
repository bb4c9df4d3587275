"""Holdings command - thin CLI orchestration layer."""

import sys
from pathlib import Path

import click
from rich.console import Console

from foliotrack.cli.commands.common import BOOK_ARGUMENT, MARKET_OPTION, build_quotes, current_config
from foliotrack.cli.ui.formatters import add_holding_row, add_summary_row, create_holdings_table, format_pl
from foliotrack.services.holdings import EngineConfig, HoldingsService
from foliotrack.storage import load_book


@click.command("holdings")
@BOOK_ARGUMENT
@click.option("--portfolio", "-p", "portfolio_id", required=True, help="Portfolio ID to show")
@MARKET_OPTION
@click.option(
    "--strict/--lenient",
    default=None,
    help="Fail on a SELL that exceeds the held quantity (default from config: lenient)",
)
def holdings_command(book_path: Path, portfolio_id: str, market_path: Path | None, strict: bool | None):
    """
    Show the open holdings of one portfolio.

    Positions use weighted-average cost. Tickers without a market price are
    valued at cost and marked with '*'.

    Example:
        foliotrack holdings book.json --portfolio growth --market market.yaml
    """
    console = Console()
    config = current_config()

    try:
        book = load_book(book_path)
        portfolio = book.get_portfolio(portfolio_id)
        if portfolio is None:
            console.print(f"[red]Error: portfolio '{portfolio_id}' not found in {book_path}[/red]")
            console.print(f"[dim]Available: {', '.join(book.portfolio_ids()) or '-'}[/dim]")
            sys.exit(1)

        engine_config = config.engine if strict is None else EngineConfig(strict=strict)
        service = HoldingsService(engine_config)
        quotes, sectors = build_quotes(config, market_path)

        holdings = service.get_holdings(book.transactions, portfolio_id, quotes.get_price, sectors)
        realized = service.get_realized_pl(book.transactions, portfolio_id)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not holdings:
        console.print(f"[yellow]No open holdings in {portfolio.name}[/yellow]")
    else:
        table = create_holdings_table(f"{portfolio.name} ({portfolio.currency})")
        for holding in holdings:
            add_holding_row(table, holding)
        add_summary_row(table, service.summarize(holdings))
        console.print(table)

        if any(h.price_is_fallback for h in holdings):
            console.print("[dim]* no market price, valued at average cost[/dim]")

    console.print(f"Realized P&L (FIFO): {format_pl(realized)}")
