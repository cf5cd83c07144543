"""Tests for the market feed driver.

**Feature: market-simulation**
"""

import random
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
import toml
from hypothesis import given, settings
from hypothesis import strategies as st

from trademind.market.catalog import CatalogError, catalog
from trademind.market.engine import HISTORY_LENGTH
from trademind.market.feed import DEFAULT_TICK_INTERVAL, MarketFeed, feed_from_config


NOW = datetime(2024, 3, 15, 9, 15)


def fixed_clock() -> datetime:
    return NOW


def make_feed(seed: int = 42, **kwargs) -> MarketFeed:
    return MarketFeed(rng=random.Random(seed), clock=fixed_clock, **kwargs)


class TestFeedLifecycle:
    """
    **Feature: market-simulation, Property 13: Feed Lifecycle**

    The feed initializes once and replaces its snapshot on every step.
    """

    def test_default_interval(self):
        assert make_feed().interval == DEFAULT_TICK_INTERVAL == 3.0

    def test_snapshot_before_start_raises(self):
        feed = make_feed()
        assert not feed.started
        with pytest.raises(RuntimeError):
            feed.snapshot

    def test_step_before_start_raises(self):
        with pytest.raises(RuntimeError):
            make_feed().step()

    def test_start_is_idempotent(self):
        feed = make_feed()
        first = feed.start()
        assert feed.start() is first
        assert len(first) == len(catalog())

    def test_step_replaces_snapshot(self):
        feed = make_feed()
        initial = feed.start()

        updated = feed.step()

        assert updated is feed.snapshot
        assert updated is not initial
        assert feed.tick_count == 1
        # the old snapshot is left as it was
        assert initial[0].history[-1] == updated[0].history[-2]

    @given(steps=st.integers(min_value=1, max_value=25))
    @settings(max_examples=20, deadline=None)
    def test_window_length_after_steps(self, steps: int):
        feed = make_feed()
        feed.start()
        for _ in range(steps):
            feed.step()
        assert feed.tick_count == steps
        assert all(len(s.history) == HISTORY_LENGTH for s in feed.snapshot)

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            MarketFeed(interval=0)

    def test_seeded_feeds_replay(self):
        a, b = make_feed(7), make_feed(7)
        a.start(), b.start()
        for _ in range(5):
            a.step(), b.step()
        assert a.snapshot == b.snapshot


class TestFeedLookup:
    """Symbol lookup in the current snapshot."""

    def test_get_case_insensitive(self):
        feed = make_feed()
        feed.start()
        assert feed.get("aapl").symbol == "AAPL"

    def test_get_unknown_symbol(self):
        feed = make_feed()
        feed.start()
        with pytest.raises(KeyError):
            feed.get("NOPE")

    def test_symbols_in_catalog_order(self):
        assert make_feed().symbols() == [seed.symbol for seed in catalog()]


class TestFeedRun:
    """The blocking tick loop."""

    def test_run_publishes_initial_and_each_tick(self):
        feed = make_feed(interval=1.5)
        updates = []
        sleeps = []

        last = feed.run(updates.append, max_ticks=4, sleep=sleeps.append)

        assert len(updates) == 5
        assert sleeps == [1.5] * 4
        assert last is updates[-1]
        assert feed.tick_count == 4

    def test_stop_from_callback(self):
        feed = make_feed()
        updates = []

        def on_update(snapshot):
            updates.append(snapshot)
            if len(updates) == 3:
                feed.stop()

        feed.run(on_update, sleep=lambda _: None)

        assert len(updates) == 3

    def test_run_zero_ticks(self):
        feed = make_feed()
        updates = []
        feed.run(updates.append, max_ticks=0, sleep=lambda _: None)
        assert len(updates) == 1


class TestFeedFromConfig:
    """Building a feed from configuration."""

    def test_seeded_config_replays(self):
        config = {"market": {"tick_interval": 2.0, "seed": 99, "catalog_path": ""}}

        a, b = feed_from_config(config), feed_from_config(config)

        assert a.interval == 2.0
        assert [s.price for s in a.start()] == [s.price for s in b.start()]

    def test_custom_catalog(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "catalog.toml"
            path.write_text(toml.dumps({"instruments": [{
                "symbol": "DOGE",
                "name": "Dogecoin",
                "sector": "Crypto",
                "market": "CRYPTO",
                "base_price": 0.15,
                "market_cap": 20,
            }]}))

            feed = feed_from_config({"market": {"catalog_path": str(path)}})

        assert feed.symbols() == ["DOGE"]

    def test_bad_catalog_fails_fast(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "catalog.toml"
            path.write_text(toml.dumps({"instruments": []}))

            with pytest.raises(CatalogError):
                feed_from_config({"market": {"catalog_path": str(path)}})

    def test_lowercase_catalog_symbol_reachable(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "catalog.toml"
            path.write_text(toml.dumps({"instruments": [{
                "symbol": "doge",
                "name": "Dogecoin",
                "sector": "Crypto",
                "market": "CRYPTO",
                "base_price": 0.15,
                "market_cap": 20,
            }]}))

            feed = feed_from_config({"market": {"catalog_path": str(path), "seed": 3}})

        feed.start()
        assert feed.get("doge").symbol == "DOGE"
        assert feed.get("DOGE").name == "Dogecoin"
