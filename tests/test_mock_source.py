import pytest

from coinmarket_tui.models.ticker import FetchError, FetchErrorKind
from coinmarket_tui.platforms.mock import DEFAULT_PRICES, MockMarketSource


class TestMockMarketSource:
    @pytest.mark.asyncio
    async def test_same_seed_replays_same_prices(self):
        first = await MockMarketSource(seed=7).fetch()
        second = await MockMarketSource(seed=7).fetch()
        assert [(r.symbol, r.price) for r in first] == [(r.symbol, r.price) for r in second]
        assert {r.symbol for r in first} == set(DEFAULT_PRICES)

    @pytest.mark.asyncio
    async def test_prices_walk_between_fetches(self):
        source = MockMarketSource(seed=1, symbols=["btcusdt"])
        first = await source.fetch()
        second = await source.fetch()
        assert first[0].symbol == "BTCUSDT"
        assert first[0].price != second[0].price
        assert first[0].price > 0
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_injected_failure(self):
        source = MockMarketSource(failure_rate=1.0)
        with pytest.raises(FetchError) as exc_info:
            await source.fetch()
        assert exc_info.value.kind is FetchErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_unknown_symbols_get_a_price(self):
        records = await MockMarketSource(symbols=["FOOUSDT"]).fetch()
        assert records[0].symbol == "FOOUSDT"
        assert records[0].price > 0
