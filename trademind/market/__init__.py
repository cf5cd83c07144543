"""Simulated market data for TradeMind.

- catalog: Fixed instrument seed table
- engine: Stateless initialize/tick simulation
- feed: Host loop holding the current snapshot
- screener: Read-only filtering, sorting and ranking
"""

from trademind.market.catalog import (
    CatalogError,
    catalog,
    catalog_from_file,
    load_catalog,
    validate_catalog,
)
from trademind.market.engine import (
    HISTORY_LENGTH,
    SnapshotError,
    initialize,
    tick,
)
from trademind.market.feed import DEFAULT_TICK_INTERVAL, MarketFeed, feed_from_config

__all__ = [
    "CatalogError",
    "SnapshotError",
    "HISTORY_LENGTH",
    "DEFAULT_TICK_INTERVAL",
    "MarketFeed",
    "feed_from_config",
    "catalog",
    "catalog_from_file",
    "load_catalog",
    "validate_catalog",
    "initialize",
    "tick",
]
