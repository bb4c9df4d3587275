"""Commands __init__ - exports all commands."""

from foliotrack.cli.commands.dashboard import dashboard_command
from foliotrack.cli.commands.holdings import holdings_command
from foliotrack.cli.commands.realized import realized_command

__all__ = ["dashboard_command", "holdings_command", "realized_command"]
