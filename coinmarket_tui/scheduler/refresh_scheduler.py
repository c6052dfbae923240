"""
Refresh scheduling with generation tags.

Fetches run as their own asyncio tasks so the app loop never waits on the
network. Each launch bumps the generation counter; when a fetch finishes its
tag is compared with the counter and superseded results are dropped instead
of cancelling the request that produced them.
"""
import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from coinmarket_tui.contracts.market_data import MarketDataSource
from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, RefreshCycle
from coinmarket_tui.platforms.base import classify_fetch_error
from coinmarket_tui.scheduler.backoff import BackoffPolicy


class RefreshScheduler:
    """Launches refresh cycles on a timer and on demand.

    A scheduled tick only launches when the current generation is no longer in
    flight. ``force_refresh`` always launches a newer generation; the older
    fetch keeps running and its result is discarded when it lands.
    Completed current cycles are put on ``results`` for the app loop.
    """

    def __init__(
        self,
        source: MarketDataSource,
        results: "asyncio.Queue[RefreshCycle]",
        logger: Logger,
        interval: float,
        backoff_ceiling: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.results = results
        self.logger = logger
        self.backoff = BackoffPolicy(base=interval, ceiling=backoff_ceiling)
        self.clock = clock
        self.generation = 0
        self.consecutive_failures = 0
        self.running = False
        self._in_flight: Dict[int, asyncio.Task] = {}
        self._next_due: Optional[float] = None
        self._wake = asyncio.Event()
        self._timer_task: Optional[asyncio.Task] = None

    @property
    def current_interval(self) -> float:
        return self.backoff.interval(self.consecutive_failures)

    @property
    def is_current_in_flight(self) -> bool:
        return self.generation in self._in_flight

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    @property
    def seconds_until_next(self) -> Optional[float]:
        if self._next_due is None:
            return None
        return max(0.0, self._next_due - self.clock())

    def start(self) -> None:
        """Start the timer task; the first cycle launches immediately."""
        if self.running:
            return
        self.running = True
        self._next_due = self.clock()
        self._timer_task = asyncio.create_task(self._run(), name="Refresh-Scheduler")
        self.logger.debug(f"Refresh scheduler started (interval {self.backoff.base:.1f}s, "
                          f"ceiling {self.backoff.ceiling:.1f}s)")

    async def _run(self) -> None:
        try:
            while self.running:
                timeout = self.seconds_until_next
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=timeout)
                except asyncio.TimeoutError:
                    pass
                self._wake.clear()
                if not self.running:
                    break
                due = self._next_due is not None and self.clock() >= self._next_due
                if due and not self.is_current_in_flight:
                    self.launch()
        except asyncio.CancelledError:
            self.logger.debug("Refresh scheduler task cancelled")
            raise

    def force_refresh(self) -> RefreshCycle:
        """Start a new generation now, superseding anything still in flight."""
        self.logger.info("Forced refresh requested")
        return self.launch()

    def launch(self) -> RefreshCycle:
        self.generation += 1
        cycle = RefreshCycle.pending(self.generation, datetime.now(timezone.utc))
        # The next tick is armed when this cycle completes
        self._next_due = None
        task = asyncio.create_task(self._fetch(cycle), name=f"Refresh-{cycle.generation}")
        self._in_flight[cycle.generation] = task
        task.add_done_callback(lambda _t, g=cycle.generation: self._in_flight.pop(g, None))
        self.logger.debug(f"Launched refresh generation {cycle.generation} "
                          f"({len(self._in_flight)} in flight)")
        return cycle

    async def _fetch(self, cycle: RefreshCycle) -> None:
        try:
            records = await self.source.fetch()
            outcome = cycle.succeeded(records)
        except FetchError as e:
            outcome = cycle.failed(e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Unexpected error from {getattr(self.source, 'name', 'source')}: "
                              f"{type(e).__name__} - {e}", exc_info=True)
            outcome = cycle.failed(classify_fetch_error(e))
        self.complete(outcome)

    def complete(self, outcome: RefreshCycle) -> bool:
        """Record a finished cycle. Returns False when it was superseded."""
        if outcome.generation != self.generation:
            self.logger.debug(f"Discarding stale refresh generation {outcome.generation} "
                              f"(current {self.generation})")
            return False

        if outcome.is_success:
            if self.consecutive_failures:
                self.logger.info(f"Market data recovered after {self.consecutive_failures} failed refresh(es)")
            self.consecutive_failures = 0
        else:
            self.consecutive_failures += 1
            self.logger.warning(
                f"Refresh generation {outcome.generation} failed: {outcome.error.describe()}. "
                f"Next attempt in {self.current_interval:.1f}s"
            )

        self._next_due = self.clock() + self.current_interval
        self._wake.set()
        self.results.put_nowait(outcome)
        return True

    def is_current(self, cycle: RefreshCycle) -> bool:
        return cycle.generation == self.generation

    def stop(self) -> None:
        """Stop scheduling and abandon in-flight fetches without waiting for them."""
        self.running = False
        self._wake.set()
        if self._timer_task and not self._timer_task.done():
            self._timer_task.cancel()
        for task in list(self._in_flight.values()):
            if not task.done():
                task.cancel()
        self._in_flight.clear()
        self.logger.debug("Refresh scheduler stopped")
