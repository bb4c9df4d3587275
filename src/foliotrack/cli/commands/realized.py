"""Realized P&L command - thin CLI orchestration layer."""

import sys
from pathlib import Path

import click
from rich.console import Console

from foliotrack.cli.commands.common import BOOK_ARGUMENT, current_config
from foliotrack.cli.ui.formatters import add_closed_lot_row, create_closed_lots_table, format_pl
from foliotrack.services.holdings import EngineConfig, HoldingsService
from foliotrack.storage import load_book


@click.command("realized")
@BOOK_ARGUMENT
@click.option("--portfolio", "-p", "portfolio_id", default=None, help="Portfolio ID (default: all portfolios)")
@click.option("--lots", "show_lots", is_flag=True, help="List every closed lot fragment")
@click.option(
    "--strict/--lenient",
    default=None,
    help="Fail on a SELL that exceeds the open lots (default from config: lenient)",
)
def realized_command(book_path: Path, portfolio_id: str | None, show_lots: bool, strict: bool | None):
    """
    Show realized P&L under FIFO lot matching.

    Each SELL is matched against the oldest open BUY lots; its fee is
    charged once.

    Example:
        foliotrack realized book.json --portfolio growth --lots
    """
    console = Console()
    config = current_config()

    try:
        book = load_book(book_path)
        if portfolio_id is not None and book.get_portfolio(portfolio_id) is None:
            console.print(f"[red]Error: portfolio '{portfolio_id}' not found in {book_path}[/red]")
            sys.exit(1)

        engine_config = config.engine if strict is None else EngineConfig(strict=strict)
        service = HoldingsService(engine_config)
        closed = service.get_closed_lots(book.transactions, portfolio_id)
        realized = service.get_realized_pl(book.transactions, portfolio_id)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if show_lots:
        if closed:
            table = create_closed_lots_table()
            for lot in closed:
                add_closed_lot_row(table, lot)
            console.print(table)
        else:
            console.print("[yellow]No closed lots[/yellow]")

    scope = portfolio_id or "all portfolios"
    console.print(f"Realized P&L ({scope}): {format_pl(realized)}")
