"""Instrument catalog for the market simulation.

The catalog is a fixed, read-only table of instrument seeds spanning the
USA and India equity markets and a handful of crypto assets. Alternative
catalogs can be loaded from TOML once at startup; either way the result is
an immutable tuple validated as a whole.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from trademind.models import InstrumentSeed


logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a catalog fails validation."""


BASE_INSTRUMENTS = [
    # USA
    {"symbol": "AAPL", "name": "Apple Inc.", "sector": "Technology", "market": "USA", "base_price": 175.50, "market_cap": 2800},
    {"symbol": "MSFT", "name": "Microsoft Corp.", "sector": "Technology", "market": "USA", "base_price": 320.00, "market_cap": 2400},
    {"symbol": "GOOGL", "name": "Alphabet Inc.", "sector": "Technology", "market": "USA", "base_price": 135.20, "market_cap": 1700},
    {"symbol": "AMZN", "name": "Amazon.com", "sector": "Consumer Cyclical", "market": "USA", "base_price": 145.30, "market_cap": 1500},
    {"symbol": "TSLA", "name": "Tesla Inc.", "sector": "Automotive", "market": "USA", "base_price": 240.50, "market_cap": 800},
    {"symbol": "JPM", "name": "JPMorgan Chase", "sector": "Finance", "market": "USA", "base_price": 150.10, "market_cap": 430},
    {"symbol": "NVDA", "name": "NVIDIA Corp.", "sector": "Technology", "market": "USA", "base_price": 460.15, "market_cap": 1100},
    {"symbol": "PFE", "name": "Pfizer Inc.", "sector": "Healthcare", "market": "USA", "base_price": 33.50, "market_cap": 190},
    # INDIA
    {"symbol": "RELIANCE", "name": "Reliance Industries", "sector": "Energy", "market": "INDIA", "base_price": 2350.00, "market_cap": 200},
    {"symbol": "TCS", "name": "Tata Consultancy Svcs", "sector": "Technology", "market": "INDIA", "base_price": 3400.00, "market_cap": 150},
    {"symbol": "HDFCBANK", "name": "HDFC Bank", "sector": "Finance", "market": "INDIA", "base_price": 1520.00, "market_cap": 120},
    {"symbol": "INFY", "name": "Infosys Ltd", "sector": "Technology", "market": "INDIA", "base_price": 1450.00, "market_cap": 80},
    {"symbol": "ICICIBANK", "name": "ICICI Bank", "sector": "Finance", "market": "INDIA", "base_price": 950.00, "market_cap": 70},
    {"symbol": "TATAMOTORS", "name": "Tata Motors", "sector": "Automotive", "market": "INDIA", "base_price": 620.00, "market_cap": 30},
    {"symbol": "ITC", "name": "ITC Limited", "sector": "Consumer Defensive", "market": "INDIA", "base_price": 440.00, "market_cap": 60},
    # CRYPTO
    {"symbol": "BTC", "name": "Bitcoin", "sector": "Crypto", "market": "CRYPTO", "base_price": 64000.00, "market_cap": 1200},
    {"symbol": "ETH", "name": "Ethereum", "sector": "Crypto", "market": "CRYPTO", "base_price": 3400.00, "market_cap": 400},
    {"symbol": "SOL", "name": "Solana", "sector": "Crypto", "market": "CRYPTO", "base_price": 145.00, "market_cap": 65},
]


def validate_catalog(seeds: Iterable[InstrumentSeed]) -> tuple[InstrumentSeed, ...]:
    """Validate a catalog as a whole.

    Args:
        seeds: Instrument seeds in catalog order.

    Returns:
        The seeds as an immutable tuple.

    Raises:
        CatalogError: If the catalog is empty, repeats a symbol, or any seed
            has a non-positive base price or market cap.
    """
    seeds = tuple(seeds)
    if not seeds:
        raise CatalogError("Catalog is empty")

    seen: set[str] = set()
    for seed in seeds:
        if seed.symbol in seen:
            raise CatalogError(f"Duplicate symbol in catalog: {seed.symbol}")
        seen.add(seed.symbol)

        if not seed.base_price > 0:
            raise CatalogError(
                f"{seed.symbol}: base price must be positive, got {seed.base_price}"
            )
        if not seed.market_cap > 0:
            raise CatalogError(
                f"{seed.symbol}: market cap must be positive, got {seed.market_cap}"
            )

    return seeds


def load_catalog(
    entries: Iterable[Union[Mapping, InstrumentSeed]],
) -> tuple[InstrumentSeed, ...]:
    """Build and validate a catalog from raw mappings or seeds.

    Args:
        entries: Mappings with seed fields, or ready-made seeds.

    Returns:
        Validated, immutable catalog.

    Raises:
        CatalogError: If any entry is malformed or the catalog is invalid.
    """
    seeds = []
    for index, entry in enumerate(entries):
        if isinstance(entry, InstrumentSeed):
            seeds.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise CatalogError(
                f"Invalid catalog entry #{index}: expected a table of fields, got {entry!r}"
            )
        try:
            seeds.append(InstrumentSeed.model_validate(dict(entry)))
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog entry #{index}: {e}") from e

    return validate_catalog(seeds)


def catalog_from_file(path: Path) -> tuple[InstrumentSeed, ...]:
    """Load a catalog from a TOML file with an ``[[instruments]]`` array.

    Args:
        path: Path to the TOML file.

    Returns:
        Validated, immutable catalog.

    Raises:
        CatalogError: If the file cannot be read or the catalog is invalid.
    """
    import toml

    try:
        data = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e

    instruments = data.get("instruments", [])
    if not isinstance(instruments, list):
        raise CatalogError(f"{path}: 'instruments' must be an array of tables ([[instruments]])")

    seeds = load_catalog(instruments)
    logger.info("Loaded %d instruments from %s", len(seeds), path)
    return seeds


_DEFAULT_CATALOG = load_catalog(BASE_INSTRUMENTS)


def catalog() -> tuple[InstrumentSeed, ...]:
    """Return the built-in instrument catalog.

    Covers every ``Market`` with at least one instrument, in a stable order.
    """
    return _DEFAULT_CATALOG
