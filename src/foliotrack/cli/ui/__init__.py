"""CLI UI components - Rich table formatters."""

from foliotrack.cli.ui.formatters import (
    create_allocation_table,
    create_closed_lots_table,
    create_dashboard_totals_table,
    create_holdings_table,
    create_movers_table,
)

__all__ = [
    "create_allocation_table",
    "create_closed_lots_table",
    "create_dashboard_totals_table",
    "create_holdings_table",
    "create_movers_table",
]
