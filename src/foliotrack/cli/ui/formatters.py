"""Rich table formatters for CLI output."""

from collections.abc import Iterable
from decimal import Decimal

from rich.table import Table

from foliotrack.services.dashboard.models import AllocationItem, DashboardSummary
from foliotrack.services.holdings.models import ClosedLot, Holding, PortfolioSummary


def format_money(value: Decimal, currency: str | None = None) -> str:
    """Two decimals with thousands separators, optionally suffixed by currency."""
    text = f"{value:,.2f}"
    return f"{text} {currency}" if currency else text


def format_quantity(value: Decimal) -> str:
    """Quantity without trailing zeros (10, 2.5, 0.125)."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_pl(value: Decimal, suffix: str = "") -> str:
    """Signed value coloured green (gain) or red (loss)."""
    text = f"{value:+,.2f}{suffix}"
    if value > 0:
        return f"[green]{text}[/green]"
    if value < 0:
        return f"[red]{text}[/red]"
    return text


def create_holdings_table(title: str) -> Table:
    """
    Create a Rich table for holdings.

    Args:
        title: Table title (usually the portfolio name)

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="green", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right", style="yellow")
    table.add_column("Unrealized", justify="right")
    table.add_column("P&L %", justify="right")
    table.add_column("Alloc %", justify="right", style="magenta")
    return table


def add_holding_row(table: Table, holding: Holding) -> None:
    """
    Add a holding row to the holdings table.

    Prices that fell back to average cost are marked with an asterisk.
    """
    price = format_money(holding.current_price)
    if holding.price_is_fallback:
        price = f"[dim]{price}*[/dim]"

    table.add_row(
        holding.ticker,
        format_quantity(holding.quantity),
        format_money(holding.avg_buy_price),
        price,
        format_money(holding.current_value),
        format_pl(holding.unrealized_pl),
        format_pl(holding.unrealized_pl_percent, "%"),
        f"{holding.allocation:.2f}",
    )


def add_summary_row(table: Table, summary: PortfolioSummary) -> None:
    """Append a totals row below the holdings."""
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        "",
        "",
        "",
        format_money(summary.current_value),
        format_pl(summary.unrealized_pl),
        format_pl(summary.unrealized_pl_percent, "%"),
        "100.00" if summary.holding_count else "0.00",
    )


def create_closed_lots_table() -> Table:
    """
    Create a Rich table for FIFO closed lots.

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title="Closed Lots (FIFO)", show_header=True, header_style="bold cyan")
    table.add_column("Closed", style="dim", no_wrap=True)
    table.add_column("Portfolio", style="cyan")
    table.add_column("Ticker", style="green", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Sell", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("Realized", justify="right")
    return table


def add_closed_lot_row(table: Table, lot: ClosedLot) -> None:
    table.add_row(
        lot.closed_at.date().isoformat(),
        lot.portfolio_id,
        lot.ticker,
        format_quantity(lot.quantity),
        format_money(lot.cost_price),
        format_money(lot.sell_price),
        format_money(lot.fees),
        format_pl(lot.realized_pl),
    )


def create_allocation_table(title: str, items: Iterable[AllocationItem], currency: str) -> Table:
    """
    Create a Rich table for one allocation breakdown.

    Args:
        title: Table title (e.g. "Sector Allocation")
        items: Allocation slices, already sorted
        currency: Display currency of the values

    Returns:
        Filled Rich Table
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column(f"Value ({currency})", justify="right", style="yellow")
    table.add_column("%", justify="right", style="magenta")
    for item in items:
        table.add_row(item.name, format_money(item.value), f"{item.percentage:.2f}")
    return table


def create_dashboard_totals_table(summary: DashboardSummary) -> Table:
    """
    Create a Rich two-column table with the dashboard totals.

    Returns:
        Filled Rich Table
    """
    table = Table(title=f"Dashboard ({summary.currency})", show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Invested", format_money(summary.total_invested))
    table.add_row("Current Value", format_money(summary.total_current_value))
    table.add_row("Cash", format_money(summary.total_cash))
    table.add_row("Unrealized P&L", format_pl(summary.total_unrealized_pl))
    table.add_row("Realized P&L", format_pl(summary.total_realized_pl))
    table.add_row("Total P&L", format_pl(summary.total_pl))
    table.add_row("Total P&L %", format_pl(summary.total_pl_percent, "%"))
    return table


def create_movers_table(title: str, holdings: Iterable[Holding]) -> Table:
    """Create a Rich table listing holdings by unrealized P&L percent."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Portfolio", style="cyan")
    table.add_column("Ticker", style="green", no_wrap=True)
    table.add_column("Value", justify="right", style="yellow")
    table.add_column("P&L %", justify="right")
    for holding in holdings:
        table.add_row(
            holding.portfolio_id,
            holding.ticker,
            format_money(holding.current_value),
            format_pl(holding.unrealized_pl_percent, "%"),
        )
    return table
