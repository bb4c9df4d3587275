"""Schema-versioned book loader.

Architecture:
    book.json ← JSON document, ``schema_version`` selects the format
         ↓
    migrations (version N → N+1) until CURRENT_BOOK_VERSION
         ↓
    JSON Schema validation (book.v{N}.json, Draft 2020-12)
         ↓
    Pydantic Book (Portfolio, Transaction records)

Version 0 is the legacy layout: a bare array of camelCase transaction
objects, or an object with ``transactions``/``portfolios`` arrays and no
``schema_version``. It is migrated on load; dump_book always writes the
current version.
"""

import json
from collections.abc import Callable
from decimal import Decimal
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
import structlog
import yaml
from jsonschema import Draft202012Validator, FormatChecker
from pydantic import ValidationError

from foliotrack.storage.models import CURRENT_BOOK_VERSION, Book, MarketSnapshot

logger = structlog.get_logger(__name__)

# Schema package path (single source of truth for imports)
SCHEMA_PACKAGE = "foliotrack.contracts.schemas"

LEGACY_TRANSACTION_FIELDS = {
    "id": "transaction_id",
    "portfolioId": "portfolio_id",
    "date": "date",
    "action": "action",
    "ticker": "ticker",
    "exchange": "exchange",
    "country": "country",
    "quantity": "quantity",
    "tradePrice": "trade_price",
    "currency": "currency",
    "fees": "fees",
    "notes": "notes",
    "tag": "tag",
}

LEGACY_PORTFOLIO_FIELDS = {
    "id": "portfolio_id",
    "name": "name",
    "description": "description",
    "country": "country",
    "currency": "currency",
    "cashPosition": "cash",
}


class BookFormatError(ValueError):
    """The book document cannot be read as any supported version."""


@lru_cache(maxsize=8)
def load_book_schema(version: int) -> Draft202012Validator:
    """
    Load and compile the JSON Schema validator for a book version.

    Raises:
        FileNotFoundError: If no schema ships for this version
    """
    schema_name = f"book.v{version}.json"
    try:
        schema_file = resources.files(SCHEMA_PACKAGE).joinpath(schema_name)
        with schema_file.open("r", encoding="utf-8") as f:
            schema = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Schema not found: {schema_name} in package {SCHEMA_PACKAGE}")

    return Draft202012Validator(schema, format_checker=FormatChecker())


def detect_version(data: Any) -> int:
    """Schema version of a raw document (0 for the legacy layouts)."""
    if isinstance(data, list):
        return 0
    if not isinstance(data, dict):
        raise BookFormatError(f"Book must be a JSON object or array, got {type(data).__name__}")
    version = data.get("schema_version", 0)
    if not isinstance(version, int) or isinstance(version, bool):
        raise BookFormatError(f"schema_version must be an integer, got {version!r}")
    return version


def _rename(record: Any, fields: dict[str, str], kind: str) -> dict[str, Any]:
    if not isinstance(record, dict):
        raise BookFormatError(f"Legacy {kind} must be an object, got {type(record).__name__}")
    return {fields[key]: value for key, value in record.items() if key in fields and value is not None}


def _migrate_v0(data: Any) -> dict[str, Any]:
    """Legacy camelCase layout → version 1."""
    if isinstance(data, list):
        transactions, portfolios = data, []
    else:
        transactions = data.get("transactions", [])
        portfolios = data.get("portfolios", [])

    return {
        "schema_version": 1,
        "portfolios": [_rename(p, LEGACY_PORTFOLIO_FIELDS, "portfolio") for p in portfolios],
        "transactions": [_rename(t, LEGACY_TRANSACTION_FIELDS, "transaction") for t in transactions],
    }


# version → migration producing version + 1
MIGRATIONS: dict[int, Callable[[Any], dict[str, Any]]] = {
    0: _migrate_v0,
}


def parse_book(data: Any) -> Book:
    """
    Migrate, validate and parse a raw book document.

    Args:
        data: Decoded JSON (numbers ideally decoded as Decimal)

    Returns:
        Parsed Book at the current version

    Raises:
        BookFormatError: Unsupported version, schema violation or invalid record
    """
    version = detect_version(data)
    if version > CURRENT_BOOK_VERSION:
        raise BookFormatError(
            f"Book schema_version {version} is newer than supported version {CURRENT_BOOK_VERSION}"
        )

    if version < CURRENT_BOOK_VERSION:
        logger.warning("book.legacy_migrated", from_version=version, to_version=CURRENT_BOOK_VERSION)
    while version < CURRENT_BOOK_VERSION:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise BookFormatError(f"No migration from book schema_version {version}")
        data = migration(data)
        version += 1

    try:
        load_book_schema(version).validate(data)
    except jsonschema.ValidationError as e:
        raise BookFormatError(
            f"Book validation failed against book.v{version}.json: {e.message}\nPath: {list(e.path)}"
        ) from e

    try:
        return Book.model_validate(data)
    except ValidationError as e:
        raise BookFormatError(f"Invalid book record: {e}") from e


def load_book(path: str | Path) -> Book:
    """
    Load a book file.

    Raises:
        FileNotFoundError: If the file does not exist
        BookFormatError: If the content is not a valid book
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise BookFormatError(f"Failed to parse JSON from {path}: {e}") from e

    book = parse_book(data)
    logger.info(
        "book.loaded",
        path=str(path),
        portfolios=len(book.portfolios),
        transactions=len(book.transactions),
    )
    return book


def dump_book(book: Book, path: str | Path) -> None:
    """Write a book at the current schema version (decimals as strings)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = book.model_dump(mode="json")
    document["schema_version"] = CURRENT_BOOK_VERSION
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
        f.write("\n")


def load_market_snapshot(path: str | Path) -> MarketSnapshot:
    """
    Load prices and sectors from a YAML (or JSON) market file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse market file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Market file {path} must contain a mapping, got {type(data).__name__}")

    return MarketSnapshot.model_validate(data)
