import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

import pytest

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind
from coinmarket_tui.scheduler import BackoffPolicy, RefreshScheduler
from tests.helpers import make_record


class TestBackoffPolicy:
    def test_doubles_per_failure_up_to_ceiling(self):
        policy = BackoffPolicy(base=5.0, ceiling=60.0)
        assert [policy.interval(n) for n in range(6)] == [5.0, 10.0, 20.0, 40.0, 60.0, 60.0]

    def test_long_outage_stays_at_ceiling(self):
        assert BackoffPolicy(base=1.0, ceiling=30.0).interval(5000) == 30.0

    def test_ceiling_below_base_never_shortens_wait(self):
        assert BackoffPolicy(base=5.0, ceiling=2.0).interval(3) == 5.0

    def test_rejects_non_positive_base(self):
        with pytest.raises(ValueError):
            BackoffPolicy(base=0, ceiling=10)


class GatedSource:
    """Source whose fetches finish only when the test opens their gate."""
    name = "gated"

    def __init__(self):
        self.script = []
        self.calls = 0

    def add(self, records=None, error=None):
        gate = asyncio.Event()
        self.script.append((gate, records or [], error))
        return gate

    async def fetch(self):
        self.calls += 1
        gate, records, error = self.script.pop(0)
        await gate.wait()
        if error is not None:
            raise error
        return records

    async def close(self):
        return None


class TestRefreshScheduler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = MagicMock(spec=Logger)
        self.results = asyncio.Queue()

    def make_scheduler(self, source, interval=60.0, ceiling=120.0):
        scheduler = RefreshScheduler(source, self.results, self.logger,
                                     interval=interval, backoff_ceiling=ceiling)
        self.addCleanup(scheduler.stop)
        return scheduler

    async def test_out_of_order_completion_only_publishes_newest(self):
        source = GatedSource()
        old_gate = source.add([make_record("OLDUSDT")])
        new_gate = source.add([make_record("NEWUSDT")])
        scheduler = self.make_scheduler(source)

        first = scheduler.launch()
        await asyncio.sleep(0)
        second = scheduler.force_refresh()
        await asyncio.sleep(0)
        self.assertEqual((first.generation, second.generation), (1, 2))
        self.assertEqual(scheduler.in_flight_count, 2)

        new_gate.set()
        cycle = await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertEqual(cycle.generation, 2)
        self.assertEqual([r.symbol for r in cycle.records], ["NEWUSDT"])

        old_gate.set()
        await asyncio.sleep(0.01)
        self.assertTrue(self.results.empty())
        self.assertEqual(scheduler.generation, 2)
        self.assertEqual(scheduler.in_flight_count, 0)

    async def test_network_failures_back_off_and_success_resets(self):
        source = MagicMock()
        source.name = "flaky"
        source.fetch = AsyncMock(side_effect=[
            FetchError(FetchErrorKind.NETWORK, "reset"),
            FetchError(FetchErrorKind.NETWORK, "reset"),
            [make_record("BTCUSDT")],
        ])
        scheduler = self.make_scheduler(source, interval=5.0, ceiling=15.0)

        scheduler.launch()
        cycle = await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertTrue(cycle.is_failure)
        self.assertEqual(scheduler.consecutive_failures, 1)
        self.assertEqual(scheduler.current_interval, 10.0)

        scheduler.launch()
        await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertEqual(scheduler.consecutive_failures, 2)
        self.assertEqual(scheduler.current_interval, 15.0)

        scheduler.launch()
        cycle = await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertTrue(cycle.is_success)
        self.assertEqual(scheduler.consecutive_failures, 0)
        self.assertEqual(scheduler.current_interval, 5.0)

    async def test_next_tick_is_armed_after_completion(self):
        source = MagicMock()
        source.name = "fast"
        source.fetch = AsyncMock(return_value=[make_record("BTCUSDT")])
        scheduler = self.make_scheduler(source, interval=30.0)

        scheduler.launch()
        await asyncio.wait_for(self.results.get(), timeout=1)
        remaining = scheduler.seconds_until_next
        self.assertIsNotNone(remaining)
        self.assertGreater(remaining, 29.0)

    async def test_timer_launches_periodic_cycles(self):
        source = MagicMock()
        source.name = "fast"
        source.fetch = AsyncMock(return_value=[make_record("BTCUSDT")])
        scheduler = self.make_scheduler(source, interval=0.02, ceiling=0.1)

        scheduler.start()
        first = await asyncio.wait_for(self.results.get(), timeout=1)
        second = await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertEqual((first.generation, second.generation), (1, 2))

    async def test_scheduled_tick_skipped_while_cycle_in_flight(self):
        source = GatedSource()
        source.add([make_record("BTCUSDT")])
        scheduler = self.make_scheduler(source, interval=0.01, ceiling=0.01)

        scheduler.start()
        await asyncio.sleep(0.05)
        self.assertEqual(source.calls, 1)
        self.assertTrue(scheduler.is_current_in_flight)

    async def test_stop_abandons_in_flight_fetch(self):
        source = GatedSource()
        source.add([make_record("BTCUSDT")])
        scheduler = self.make_scheduler(source)

        scheduler.launch()
        await asyncio.sleep(0)
        scheduler.stop()
        self.assertEqual(scheduler.in_flight_count, 0)
        await asyncio.sleep(0.01)
        self.assertTrue(self.results.empty())

    async def test_unexpected_exception_is_classified(self):
        source = MagicMock()
        source.name = "broken"
        source.fetch = AsyncMock(side_effect=ValueError("bad payload"))
        scheduler = self.make_scheduler(source)

        scheduler.launch()
        cycle = await asyncio.wait_for(self.results.get(), timeout=1)
        self.assertTrue(cycle.is_failure)
        self.assertIs(cycle.error.kind, FetchErrorKind.PARSE)
        self.logger.error.assert_called()
