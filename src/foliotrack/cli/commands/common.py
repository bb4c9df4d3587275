"""Wiring shared by the CLI commands: config, book, quotes."""

from pathlib import Path

import click

from foliotrack.services.cache import TTLCache
from foliotrack.services.market import FallbackQuoteProvider, StaticQuoteProvider
from foliotrack.storage import MarketSnapshot, load_market_snapshot
from foliotrack.system.config import SystemConfig

BOOK_ARGUMENT = click.argument("book_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))

MARKET_OPTION = click.option(
    "--market",
    "-m",
    "market_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Market snapshot (YAML/JSON with prices and sectors). Without it holdings are valued at cost.",
)


def current_config() -> SystemConfig:
    """SystemConfig placed on the click context by the root group (defaults if run standalone)."""
    ctx = click.get_current_context(silent=True)
    config = ctx.find_object(SystemConfig) if ctx is not None else None
    return config or SystemConfig()


def build_quotes(config: SystemConfig, market_path: Path | None) -> tuple[FallbackQuoteProvider, dict[str, str]]:
    """
    Quote chain and sector map for a command run.

    Returns:
        (quotes, sectors): fallback chain over the market snapshot, and the
        config sectors overridden by the snapshot's
    """
    snapshot = load_market_snapshot(market_path) if market_path else MarketSnapshot()
    quotes = FallbackQuoteProvider(
        [StaticQuoteProvider(snapshot.prices, name=market_path.name if market_path else "static")],
        cache=TTLCache(config.cache.quote_ttl_seconds),
    )
    sectors = {ticker.upper(): sector for ticker, sector in config.sectors.items()}
    sectors.update(snapshot.sectors)
    return quotes, sectors
