from unittest.mock import MagicMock

import pytest

from coinmarket_tui.contracts.market_data import MarketDataSource
from coinmarket_tui.factories import DataSourceFactory
from coinmarket_tui.platforms import BinanceMarketSource, CoinGeckoMarketSource, MockMarketSource


@pytest.fixture
def config():
    config = MagicMock()
    config.PROVIDER = "binance"
    config.BINANCE_BASE_URL = "https://api.binance.us"
    config.BINANCE_QUOTE_ASSET = "USD"
    config.BINANCE_SYMBOLS = []
    config.BINANCE_LIMIT = 10
    config.BINANCE_API_KEY = None
    config.COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
    config.COINGECKO_VS_CURRENCY = "usd"
    config.COINGECKO_PER_PAGE = 25
    config.COINGECKO_API_KEY = "demo"
    config.MOCK_SEED = 3
    config.MOCK_SYMBOLS = ["BTCUSDT"]
    config.MOCK_FAILURE_RATE = 0.0
    config.FETCH_TIMEOUT = 7.0
    return config


class TestDataSourceFactory:
    def test_default_provider_from_config(self, logger, config):
        source = DataSourceFactory(logger, config).create()
        assert isinstance(source, BinanceMarketSource)
        assert isinstance(source, MarketDataSource)
        assert source.base_url == "https://api.binance.us"
        assert source.quote_asset == "USD"
        assert source.limit == 10
        assert source.timeout == 7.0
        logger.info.assert_called()

    def test_explicit_providers(self, logger, config):
        factory = DataSourceFactory(logger, config)
        coingecko = factory.create("CoinGecko")
        assert isinstance(coingecko, CoinGeckoMarketSource)
        assert coingecko.per_page == 25
        assert coingecko.api_key == "demo"
        assert isinstance(factory.create("mock"), MockMarketSource)

    def test_unknown_provider(self, logger, config):
        with pytest.raises(ValueError, match="kraken"):
            DataSourceFactory(logger, config).create("kraken")
