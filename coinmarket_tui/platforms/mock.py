import asyncio
import random
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind, TickerRecord

DEFAULT_PRICES: Dict[str, float] = {
    "BTCUSDT": 50000.0,
    "ETHUSDT": 3000.0,
    "BNBUSDT": 550.0,
    "SOLUSDT": 140.0,
    "XRPUSDT": 0.52,
    "ADAUSDT": 0.45,
    "DOGEUSDT": 0.12,
    "AVAXUSDT": 35.0,
    "DOTUSDT": 7.1,
    "LINKUSDT": 14.5,
    "LTCUSDT": 82.0,
    "SHIBUSDT": 0.0000245,
}


class MockMarketSource:
    """Offline market source producing a seeded random walk.

    Deterministic for a given seed, so demo sessions and tests replay the
    same prices. Optional latency and failure injection exercise the
    scheduler's staleness and backoff handling without a network.
    """
    name = "mock"

    def __init__(self, logger: Optional[Logger] = None, seed: int = 42,
                 symbols: Optional[Iterable[str]] = None, latency: float = 0.0,
                 failure_rate: float = 0.0) -> None:
        self.logger = logger
        self._rng = random.Random(seed)
        wanted = [s.upper() for s in symbols] if symbols else list(DEFAULT_PRICES)
        self._open = {s: DEFAULT_PRICES.get(s, self._rng.uniform(1, 100)) for s in wanted}
        self._last = dict(self._open)
        self.latency = latency
        self.failure_rate = failure_rate
        self.calls = 0

    async def fetch(self) -> List[TickerRecord]:
        self.calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.failure_rate and self._rng.random() < self.failure_rate:
            raise FetchError(FetchErrorKind.NETWORK, "simulated outage")

        now = datetime.now(timezone.utc)
        records = []
        for symbol, open_price in self._open.items():
            price = self._last[symbol] * (1 + self._rng.gauss(0, 0.004))
            self._last[symbol] = price
            records.append(TickerRecord(
                symbol=symbol,
                price=price,
                change_pct=(price - open_price) / open_price * 100,
                volume=self._rng.uniform(1e5, 5e9),
                updated_at=now,
            ))
        if self.logger:
            self.logger.debug(f"mock fetch #{self.calls} produced {len(records)} tickers")
        return records

    async def close(self) -> None:
        return None
