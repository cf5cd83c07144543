"""Read-only projections over a market snapshot.

Filtering, searching, sorting and ranking helpers used by the CLI views.
None of these functions modify the snapshot they are given.
"""

from collections.abc import Iterable, Sequence
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from trademind.models import InstrumentState, Market


ALL_MARKETS = "ALL"
ALL_SECTORS = "All"

Pattern = Literal["All", "Bullish", "Bearish", "Neutral"]
VALID_PATTERNS = ["All", "Bullish", "Bearish", "Neutral"]

# change_percent beyond which an instrument counts as trending
TREND_THRESHOLD = 0.5

SORT_KEYS = ["symbol", "price", "change", "change_percent", "volume", "market_cap"]


class StockFilter(BaseModel):
    """Numeric and pattern constraints for the screener."""

    min_cap: float = Field(default=0, ge=0, description="Minimum market cap (billions)")
    max_cap: float = Field(default=10000, ge=0, description="Maximum market cap (billions)")
    sectors: tuple[str, ...] = Field(default=(), description="Allowed sectors (empty = any)")
    min_volume: int = Field(default=0, ge=0, description="Minimum volume")
    pattern: Pattern = Field(default="All", description="Trend pattern")

    model_config = {"frozen": True}


def classify_trend(state: InstrumentState) -> str:
    """Classify an instrument's short-term trend.

    Returns:
        "Bullish", "Bearish" or "Neutral".
    """
    if state.change_percent > TREND_THRESHOLD:
        return "Bullish"
    if state.change_percent < -TREND_THRESHOLD:
        return "Bearish"
    return "Neutral"


def _matches_filter(state: InstrumentState, stock_filter: StockFilter) -> bool:
    if not stock_filter.min_cap <= state.market_cap <= stock_filter.max_cap:
        return False
    if stock_filter.sectors and state.sector not in stock_filter.sectors:
        return False
    if state.volume < stock_filter.min_volume:
        return False
    if stock_filter.pattern != "All" and classify_trend(state) != stock_filter.pattern:
        return False
    return True


def filter_instruments(
    states: Iterable[InstrumentState],
    market: Union[Market, str] = ALL_MARKETS,
    query: str = "",
    sector: str = ALL_SECTORS,
    stock_filter: Optional[StockFilter] = None,
) -> list[InstrumentState]:
    """Filter a snapshot for display.

    Args:
        states: Snapshot to filter.
        market: Market to keep, or "ALL".
        query: Case-insensitive substring matched against symbol or name.
        sector: Exact sector to keep, or "All".
        stock_filter: Optional numeric/pattern constraints.

    Returns:
        Matching instruments in snapshot order.
    """
    market_value = market.value if isinstance(market, Market) else market.upper()
    query = query.strip().lower()

    results = []
    for state in states:
        if market_value != ALL_MARKETS and state.market.value != market_value:
            continue
        if query and query not in state.symbol.lower() and query not in state.name.lower():
            continue
        if sector != ALL_SECTORS and state.sector != sector:
            continue
        if stock_filter is not None and not _matches_filter(state, stock_filter):
            continue
        results.append(state)
    return results


def sort_instruments(
    states: Iterable[InstrumentState],
    key: str = "symbol",
    descending: bool = False,
) -> list[InstrumentState]:
    """Sort instruments by a field.

    Raises:
        ValueError: If ``key`` is not a sortable field.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Cannot sort by '{key}'. Valid keys: {', '.join(SORT_KEYS)}")
    return sorted(states, key=lambda s: getattr(s, key), reverse=descending)


def top_gainers(states: Iterable[InstrumentState], n: int = 5) -> list[InstrumentState]:
    """Highest change_percent first."""
    return sort_instruments(states, "change_percent", descending=True)[:n]


def top_losers(states: Iterable[InstrumentState], n: int = 5) -> list[InstrumentState]:
    """Lowest change_percent first."""
    return sort_instruments(states, "change_percent")[:n]


def available_sectors(states: Iterable[InstrumentState]) -> list[str]:
    """Sectors present in a snapshot, prefixed with "All"."""
    sectors = [ALL_SECTORS]
    for state in states:
        if state.sector not in sectors:
            sectors.append(state.sector)
    return sectors


def watchlisted(
    states: Iterable[InstrumentState],
    symbols: Sequence[str],
) -> list[InstrumentState]:
    """Instruments on a watchlist, in snapshot order."""
    wanted = {s.upper() for s in symbols}
    return [state for state in states if state.symbol in wanted]


def range_position(state: InstrumentState) -> float:
    """Where the price sits in its 52-week range, as a percent in [0, 100]."""
    span = state.high_52_week - state.low_52_week
    if span <= 0:
        return 0.0
    position = (state.price - state.low_52_week) / span * 100
    return min(100.0, max(0.0, position))
