"""Market feed driver.

Owns the current snapshot and advances it through the engine on a fixed
cadence. This is the host side of the simulation: the engine itself is
stateless, the feed holds the one snapshot and replaces it on every tick.
"""

import logging
import random
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Optional

from trademind.market import engine
from trademind.market.catalog import catalog
from trademind.models import InstrumentSeed, InstrumentState


logger = logging.getLogger(__name__)


DEFAULT_TICK_INTERVAL = 3.0

Snapshot = tuple[InstrumentState, ...]


class MarketFeed:
    """Drives the market simulation for a single host.

    Initializes once from a catalog, then replaces its snapshot with the
    engine's output on every step. Not thread-safe; one caller drives it.
    """

    def __init__(
        self,
        seeds: Optional[Iterable[InstrumentSeed]] = None,
        interval: float = DEFAULT_TICK_INTERVAL,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the feed.

        Args:
            seeds: Catalog to simulate. Built-in catalog if None.
            interval: Seconds between ticks in ``run``.
            rng: Random source shared by initialize and every tick.
            clock: Callable returning the current time.
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self._seeds = tuple(seeds) if seeds is not None else catalog()
        self.interval = interval
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock or datetime.now
        self._snapshot: Optional[Snapshot] = None
        self._running = False
        self.tick_count = 0

    @property
    def started(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Snapshot:
        """The current snapshot.

        Raises:
            RuntimeError: If the feed has not been started.
        """
        if self._snapshot is None:
            raise RuntimeError("Market feed not started")
        return self._snapshot

    def start(self) -> Snapshot:
        """Initialize the snapshot from the catalog (once)."""
        if self._snapshot is None:
            self._snapshot = engine.initialize(self._seeds, rng=self._rng, now=self._clock())
            logger.info("Market feed started with %d instruments", len(self._snapshot))
        return self._snapshot

    def step(self) -> Snapshot:
        """Advance the simulation by one tick and hold the new snapshot."""
        self._snapshot = engine.tick(self.snapshot, rng=self._rng, now=self._clock())
        self.tick_count += 1
        return self._snapshot

    def get(self, symbol: str) -> InstrumentState:
        """Look up an instrument in the current snapshot.

        Raises:
            KeyError: If the symbol is not in the catalog.
        """
        symbol = symbol.upper()
        for state in self.snapshot:
            if state.symbol == symbol:
                return state
        raise KeyError(symbol)

    def symbols(self) -> list[str]:
        """Symbols in catalog order."""
        return [seed.symbol for seed in self._seeds]

    def stop(self) -> None:
        """Ask a running ``run`` loop to exit after the current tick."""
        self._running = False

    def run(
        self,
        on_update: Callable[[Snapshot], None],
        max_ticks: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Snapshot:
        """Run the tick loop, publishing every snapshot to ``on_update``.

        The initial snapshot is published first. The loop ends after
        ``max_ticks`` steps, on ``stop()``, or when interrupted.

        Args:
            on_update: Called with each new snapshot.
            max_ticks: Number of ticks before returning. Unbounded if None.
            sleep: Sleep function, injectable for tests.

        Returns:
            The last snapshot.
        """
        self._running = True
        on_update(self.start())

        ticks = 0
        while self._running and (max_ticks is None or ticks < max_ticks):
            sleep(self.interval)
            if not self._running:
                break
            on_update(self.step())
            ticks += 1

        self._running = False
        return self.snapshot


def feed_from_config(config: dict) -> MarketFeed:
    """Build a feed from a loaded configuration.

    Raises:
        CatalogError: If a configured catalog file is invalid.
    """
    from trademind.config import get_catalog_path, get_seed, get_tick_interval
    from trademind.market.catalog import catalog_from_file

    catalog_path = get_catalog_path(config)
    seeds = catalog_from_file(catalog_path) if catalog_path else None
    seed = get_seed(config)

    return MarketFeed(
        seeds=seeds,
        interval=get_tick_interval(config),
        rng=random.Random(seed) if seed is not None else None,
    )
