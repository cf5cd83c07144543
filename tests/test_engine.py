"""Property-based tests for the market simulation engine.

**Feature: market-simulation**
"""

import random
from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from trademind.market.catalog import CatalogError, catalog
from trademind.market.engine import (
    HISTORY_LENGTH,
    MIN_PRICE,
    SnapshotError,
    initialize,
    tick,
    tick_instrument,
)
from trademind.models import InstrumentSeed, InstrumentState, Market, PricePoint


NOW = datetime(2024, 3, 15, 10, 30)

IDENTITY_FIELDS = [
    "symbol",
    "name",
    "sector",
    "market",
    "market_cap",
    "volume",
    "pe_ratio",
    "high_52_week",
    "low_52_week",
]


class StubRandom:
    """Random source that replays fixed draws for ``random()``."""

    def __init__(self, draws: list[float]):
        self._draws = list(draws)
        self._index = 0

    def random(self) -> float:
        value = self._draws[self._index % len(self._draws)]
        self._index += 1
        return value

    def randrange(self, start: int, stop: int) -> int:
        return start

    def uniform(self, a: float, b: float) -> float:
        return a


def make_seed(symbol: str = "X", base_price: float = 100.0, market_cap: float = 1.0) -> InstrumentSeed:
    return InstrumentSeed(
        symbol=symbol,
        name=f"{symbol} Corp.",
        sector="Technology",
        market=Market.USA,
        base_price=base_price,
        market_cap=market_cap,
    )


def make_flat_state(price: float) -> InstrumentState:
    """A hand-built state whose history is flat at ``price``."""
    history = tuple(PricePoint(time="10:00", price=price) for _ in range(HISTORY_LENGTH))
    return InstrumentState(
        symbol="FLAT",
        name="Flat Inc.",
        sector="Utilities",
        market=Market.USA,
        market_cap=1.0,
        price=price,
        change=0.0,
        change_percent=0.0,
        volume=1_000_000,
        pe_ratio=15.0,
        high_52_week=price * 1.2,
        low_52_week=price * 0.8,
        history=history,
    )


def run_simulation(seed: int, ticks: int) -> list[tuple[InstrumentState, ...]]:
    """Initialize the built-in catalog and tick it, returning every snapshot."""
    rng = random.Random(seed)
    snapshots = [initialize(catalog(), rng=rng, now=NOW)]
    for i in range(ticks):
        snapshots.append(tick(snapshots[-1], rng=rng, now=NOW + timedelta(seconds=3 * (i + 1))))
    return snapshots


class TestHistoryLength:
    """
    **Feature: market-simulation, Property 1: History Window Length**

    *For any* instrument, after initialize and after every tick, the history
    window holds exactly 21 points.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32), ticks=st.integers(min_value=0, max_value=30))
    @settings(max_examples=30, deadline=None)
    def test_window_length_invariant(self, seed: int, ticks: int):
        for snapshot in run_simulation(seed, ticks):
            for state in snapshot:
                assert len(state.history) == HISTORY_LENGTH

    def test_initialize_timestamps_span_twenty_minutes(self):
        state = initialize([make_seed()], rng=random.Random(1), now=NOW)[0]

        assert state.history[0].time == "10:10"
        assert state.history[-1].time == "10:30"

    def test_tick_appends_point_at_now(self):
        states = initialize([make_seed()], rng=random.Random(1), now=NOW)
        later = NOW + timedelta(minutes=5)

        ticked = tick(states, rng=random.Random(2), now=later)[0]

        assert ticked.history[-1].time == "10:35"
        assert ticked.history[:-1] == states[0].history[1:]


class TestPricePositivity:
    """
    **Feature: market-simulation, Property 2: Price Positivity**

    *For any* instrument at any time, price is at least 0.01.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32), ticks=st.integers(min_value=0, max_value=30))
    @settings(max_examples=30, deadline=None)
    def test_prices_positive(self, seed: int, ticks: int):
        for snapshot in run_simulation(seed, ticks):
            for state in snapshot:
                assert state.price >= MIN_PRICE
                assert all(point.price > 0 for point in state.history)

    def test_thousand_ticks_stay_positive(self):
        rng = random.Random(1234)
        states = initialize([make_seed(base_price=100.0)], rng=rng, now=NOW)

        for _ in range(1000):
            states = tick(states, rng=rng, now=NOW)
            assert states[0].price >= MIN_PRICE
            assert len(states[0].history) == HISTORY_LENGTH


class TestPriceHistoryCoherence:
    """
    **Feature: market-simulation, Property 3: Price/History Coherence**

    *For any* instrument, price equals the newest history point.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32), ticks=st.integers(min_value=0, max_value=20))
    @settings(max_examples=30, deadline=None)
    def test_price_is_last_history_point(self, seed: int, ticks: int):
        for snapshot in run_simulation(seed, ticks):
            for state in snapshot:
                assert state.price == state.history[-1].price


class TestDerivedStatistics:
    """
    **Feature: market-simulation, Property 4: Derived Statistics Consistency**

    *For any* instrument, change and change_percent are computed from the
    oldest point of the current window.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32), ticks=st.integers(min_value=0, max_value=20))
    @settings(max_examples=30, deadline=None)
    def test_change_from_window_open(self, seed: int, ticks: int):
        for snapshot in run_simulation(seed, ticks):
            for state in snapshot:
                open_price = state.history[0].price
                assert state.change == round(state.price - open_price, 2)
                assert state.change_percent == round(state.change / open_price * 100, 2)

    def test_window_open_slides_forward(self):
        rng = random.Random(5)
        states = initialize([make_seed()], rng=rng, now=NOW)
        second_oldest = states[0].history[1].price

        ticked = tick(states, rng=rng, now=NOW)[0]

        assert ticked.open_price == second_oldest


class TestIdentityFieldsPreserved:
    """
    **Feature: market-simulation, Property 5: Identity Fields Preserved**

    *For any* tick, fields other than price, history, change and
    change_percent are carried forward unchanged.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32))
    @settings(max_examples=30, deadline=None)
    def test_identity_fields_unchanged(self, seed: int):
        rng = random.Random(seed)
        before = initialize(catalog(), rng=rng, now=NOW)
        after = tick(before, rng=rng, now=NOW)

        assert len(after) == len(before)
        for old, new in zip(before, after):
            for field in IDENTITY_FIELDS:
                assert getattr(new, field) == getattr(old, field)

    def test_tick_does_not_mutate_input(self):
        rng = random.Random(9)
        before = initialize(catalog(), rng=rng, now=NOW)
        copy = tuple(state.model_copy(deep=True) for state in before)

        tick(before, rng=rng, now=NOW)

        assert before == copy


class TestInitialization:
    """
    **Feature: market-simulation, Property 6: Initialization**

    *For any* catalog, initialize yields one state per seed in catalog order
    with fixed-at-startup statistics in their ranges.
    """

    def test_order_preserved(self):
        states = initialize(catalog(), rng=random.Random(3), now=NOW)

        assert [s.symbol for s in states] == [s.symbol for s in catalog()]

    @given(seed=st.integers(min_value=0, max_value=2**32))
    @settings(max_examples=30, deadline=None)
    def test_volume_and_pe_ranges(self, seed: int):
        for state in initialize(catalog(), rng=random.Random(seed), now=NOW):
            assert 500_000 <= state.volume < 10_500_000
            assert 10 <= state.pe_ratio <= 30

    def test_single_seed_scenario(self):
        state = initialize([make_seed("X", 100.0, 1.0)], rng=random.Random(11), now=NOW)[0]

        assert len(state.history) == HISTORY_LENGTH
        assert state.low_52_week == pytest.approx(80.0)
        assert state.high_52_week == pytest.approx(120.0)
        assert state.price > 0
        # 21 steps of at most 0.25 each
        assert 94.75 <= state.price <= 105.25

    def test_identity_copied_from_seed(self):
        seed = make_seed("ABC", 50.0, 12.5)
        state = initialize([seed], rng=random.Random(0), now=NOW)[0]

        assert state.symbol == "ABC"
        assert state.name == seed.name
        assert state.sector == seed.sector
        assert state.market == seed.market
        assert state.market_cap == 12.5

    def test_history_walk_uses_base_price_band(self):
        # every draw at the top of the band: +0.25% of base per step
        rng = StubRandom([1.0])
        state = initialize([make_seed(base_price=100.0)], rng=rng, now=NOW)[0]

        prices = [point.price for point in state.history]
        assert prices[0] == 100.25
        assert prices[-1] == pytest.approx(105.25)

    def test_invalid_catalog_rejected(self):
        seeds = [make_seed("GOOD"), make_seed("BAD", base_price=0)]

        with pytest.raises(CatalogError):
            initialize(seeds, rng=random.Random(0), now=NOW)


class TestClampBoundary:
    """
    **Feature: market-simulation, Property 7: Price Floor Clamp**

    *For any* draw that would push the price to zero or below, the new
    price is clamped to 0.01.
    """

    def test_clamp_to_minimum_price(self):
        state = make_flat_state(0.02)
        # (r - 0.5) * 0.02 * 0.002 == -5.02, so the raw price is -5
        rng = StubRandom([-125499.5])

        ticked = tick([state], rng=rng, now=NOW)[0]

        assert ticked.price == 0.01
        assert ticked.history[-1].price == 0.01

    @given(draw=st.floats(min_value=-1e9, max_value=-1.0))
    @settings(max_examples=50)
    def test_clamp_never_goes_below_floor(self, draw: float):
        ticked = tick_instrument(make_flat_state(0.05), StubRandom([draw]), NOW)

        assert ticked.price >= MIN_PRICE


class TestTickVolatility:
    """
    **Feature: market-simulation, Property 8: Tick Volatility Band**

    *For any* tick, the move is within +/-0.1% of the current price, before
    rounding.
    """

    @given(draw=st.floats(min_value=0.0, max_value=0.999999))
    @settings(max_examples=100)
    def test_move_within_band(self, draw: float):
        ticked = tick_instrument(make_flat_state(1000.0), StubRandom([draw]), NOW)

        assert 999.0 <= ticked.price <= 1001.0

    def test_independent_draws_per_instrument(self):
        states = [make_flat_state(1000.0), make_flat_state(1000.0)]

        ticked = tick(states, rng=StubRandom([0.1, 0.9]), now=NOW)

        assert ticked[0].price == 999.2
        assert ticked[1].price == 1000.8

    def test_identical_seeds_diverge(self):
        seeds = [make_seed("A", 64000.0), make_seed("B", 64000.0)]
        rng = random.Random(21)

        states = tick(initialize(seeds, rng=rng, now=NOW), rng=rng, now=NOW)

        assert states[0].history != states[1].history


class TestSnapshotValidation:
    """
    **Feature: market-simulation, Property 9: Malformed Snapshot Rejection**

    *For any* snapshot whose window is not exactly 21 points, tick fails
    instead of padding or truncating.
    """

    @given(length=st.integers(min_value=0, max_value=40).filter(lambda n: n != HISTORY_LENGTH))
    @settings(max_examples=30)
    def test_wrong_length_rejected(self, length: int):
        good = make_flat_state(10.0)
        bad = good.model_copy(update={"history": good.history[:1] * length})

        with pytest.raises(SnapshotError):
            tick([good, bad], rng=random.Random(0), now=NOW)

    def test_snapshot_error_is_value_error(self):
        assert issubclass(SnapshotError, ValueError)


class TestReplay:
    """
    **Feature: market-simulation, Property 10: Deterministic Replay**

    *For any* seed, initialize followed by N ticks reproduces exactly.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32), ticks=st.integers(min_value=0, max_value=15))
    @settings(max_examples=20, deadline=None)
    def test_same_seed_same_run(self, seed: int, ticks: int):
        assert run_simulation(seed, ticks) == run_simulation(seed, ticks)

    def test_different_seeds_differ(self):
        assert run_simulation(1, 3)[-1] != run_simulation(2, 3)[-1]
