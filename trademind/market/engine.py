"""Market simulation engine.

Two pure operations drive the simulation:

- ``initialize`` turns a catalog into live instrument states, each with a
  synthesized 21-point intraday history.
- ``tick`` advances every instrument by one bounded random-walk step and
  slides its history window.

The engine keeps no state between calls. The caller owns the snapshot and
threads it through ``tick``; randomness and wall-clock time are passed in
explicitly so a seeded generator replays exactly.

All prices and derived statistics are rounded to 2 decimals with Python's
built-in ``round`` (half-to-even on the binary value).
"""

import logging
import random
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Optional

from trademind.market.catalog import validate_catalog
from trademind.models import InstrumentSeed, InstrumentState, PricePoint


logger = logging.getLogger(__name__)


HISTORY_LENGTH = 21
HISTORY_STEP = timedelta(minutes=1)

# Maximum move per step as a fraction of price (full width of the band)
HISTORY_VOLATILITY = 0.005  # +/-0.25% of base price
TICK_VOLATILITY = 0.002  # +/-0.1% of current price

MIN_PRICE = 0.01

VOLUME_RANGE = (500_000, 10_500_000)
PE_RATIO_RANGE = (10.0, 30.0)
HIGH_52_WEEK_FACTOR = 1.2
LOW_52_WEEK_FACTOR = 0.8

TIME_FORMAT = "%H:%M"


class SnapshotError(ValueError):
    """Raised when a snapshot passed to ``tick`` breaks a structural invariant."""


def round_price(value: float) -> float:
    """Round a price or statistic to 2 decimals."""
    return round(value, 2)


def format_time(moment: datetime) -> str:
    """Format a wall-clock label for a price point."""
    return moment.strftime(TIME_FORMAT)


def derive_change(price: float, open_price: float) -> tuple[float, float]:
    """Compute (change, change_percent) against the window open.

    The percent is computed from the already rounded change.
    """
    change = round_price(price - open_price)
    change_percent = round_price(change / open_price * 100)
    return change, change_percent


def synthesize_history(
    base_price: float,
    rng: random.Random,
    now: datetime,
) -> tuple[PricePoint, ...]:
    """Synthesize a history window ending at ``now``.

    Walks forward from the base price, one point per minute, adding a
    uniform perturbation of up to 0.25% of the base price at each step.
    No clamp is applied; the running price is unrounded, stored points are
    rounded.

    Args:
        base_price: Seed base price.
        rng: Random source.
        now: Timestamp of the newest point.

    Returns:
        ``HISTORY_LENGTH`` points, oldest first.
    """
    points = []
    price = base_price
    for i in range(HISTORY_LENGTH):
        moment = now - (HISTORY_LENGTH - 1 - i) * HISTORY_STEP
        price += (rng.random() - 0.5) * base_price * HISTORY_VOLATILITY
        points.append(PricePoint(time=format_time(moment), price=round_price(price)))
    return tuple(points)


def initialize_instrument(
    seed: InstrumentSeed,
    rng: random.Random,
    now: datetime,
) -> InstrumentState:
    """Create the initial live state for a single seed."""
    history = synthesize_history(seed.base_price, rng, now)
    price = history[-1].price
    change, change_percent = derive_change(price, history[0].price)

    return InstrumentState(
        symbol=seed.symbol,
        name=seed.name,
        sector=seed.sector,
        market=seed.market,
        market_cap=seed.market_cap,
        price=price,
        change=change,
        change_percent=change_percent,
        volume=rng.randrange(*VOLUME_RANGE),
        pe_ratio=round_price(rng.uniform(*PE_RATIO_RANGE)),
        high_52_week=seed.base_price * HIGH_52_WEEK_FACTOR,
        low_52_week=seed.base_price * LOW_52_WEEK_FACTOR,
        history=history,
    )


def initialize(
    seeds: Iterable[InstrumentSeed],
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> tuple[InstrumentState, ...]:
    """Initialize live state for every instrument in a catalog.

    Args:
        seeds: The catalog.
        rng: Random source. A fresh unseeded generator if None.
        now: Timestamp of the newest history point. Current time if None.

    Returns:
        One state per seed, in catalog order.

    Raises:
        CatalogError: If the catalog is empty, repeats a symbol, or has a
            seed with non-positive base price or market cap.
    """
    seeds = validate_catalog(seeds)
    if rng is None:
        rng = random.Random()
    if now is None:
        now = datetime.now()

    states = tuple(initialize_instrument(seed, rng, now) for seed in seeds)
    logger.debug("Initialized %d instruments", len(states))
    return states


def _check_state(state: InstrumentState) -> None:
    if len(state.history) != HISTORY_LENGTH:
        raise SnapshotError(
            f"{state.symbol}: history window has {len(state.history)} points, "
            f"expected {HISTORY_LENGTH}"
        )


def tick_instrument(
    state: InstrumentState,
    rng: random.Random,
    now: datetime,
) -> InstrumentState:
    """Advance a single instrument by one step.

    Raises:
        SnapshotError: If the history window is not exactly 21 points.
    """
    _check_state(state)

    perturbation = (rng.random() - 0.5) * state.price * TICK_VOLATILITY
    new_price = round_price(max(MIN_PRICE, state.price + perturbation))

    history = state.history[1:] + (PricePoint(time=format_time(now), price=new_price),)
    change, change_percent = derive_change(new_price, history[0].price)

    return state.model_copy(
        update={
            "price": new_price,
            "change": change,
            "change_percent": change_percent,
            "history": history,
        }
    )


def tick(
    previous: Sequence[InstrumentState],
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> tuple[InstrumentState, ...]:
    """Advance every instrument by one simulation step.

    The input is left untouched; a new snapshot is returned with the same
    length and order. Instruments are updated independently.

    Args:
        previous: The most recent snapshot.
        rng: Random source. A fresh unseeded generator if None.
        now: Timestamp for the new history point. Current time if None.

    Returns:
        The next snapshot.

    Raises:
        SnapshotError: If any instrument's history window is not exactly
            21 points (e.g. a hand-built snapshot).
    """
    if rng is None:
        rng = random.Random()
    if now is None:
        now = datetime.now()

    states = tuple(tick_instrument(state, rng, now) for state in previous)
    logger.debug("Ticked %d instruments at %s", len(states), format_time(now))
    return states
