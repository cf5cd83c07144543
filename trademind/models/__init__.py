"""Data models for TradeMind."""

from trademind.models.instrument import (
    InstrumentSeed,
    InstrumentState,
    Market,
    PricePoint,
)
from trademind.models.watchlist import Watchlist

__all__ = [
    "InstrumentSeed",
    "InstrumentState",
    "Market",
    "PricePoint",
    "Watchlist",
]
