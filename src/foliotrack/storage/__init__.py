"""Book and market snapshot loading."""

from foliotrack.storage.loader import (
    BookFormatError,
    dump_book,
    load_book,
    load_market_snapshot,
    parse_book,
)
from foliotrack.storage.models import CURRENT_BOOK_VERSION, Book, MarketSnapshot, Portfolio

__all__ = [
    "Book",
    "Portfolio",
    "MarketSnapshot",
    "CURRENT_BOOK_VERSION",
    "BookFormatError",
    "load_book",
    "parse_book",
    "dump_book",
    "load_market_snapshot",
]
