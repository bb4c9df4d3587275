"""foliotrack CLI main entry point."""

import sys
from pathlib import Path

import click
from rich.console import Console

from foliotrack import __version__
from foliotrack.cli.commands import dashboard_command, holdings_command, realized_command
from foliotrack.system import LoggerFactory, reload_system_config


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to foliotrack.yaml (default: ./config/foliotrack.yaml, then ~/.foliotrack/foliotrack.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the configured console log level",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, log_level: str | None):
    """foliotrack - Personal Portfolio Tracker"""
    try:
        config = reload_system_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        Console().print(f"[red]Error loading config: {e}[/red]")
        sys.exit(1)

    logging_config = config.logging
    if log_level is not None:
        logging_config = logging_config.model_copy(update={"level": log_level.upper()})
    LoggerFactory.configure(logging_config)

    ctx.obj = config


# Register commands
main.add_command(holdings_command)
main.add_command(realized_command)
main.add_command(dashboard_command)


if __name__ == "__main__":
    main()
