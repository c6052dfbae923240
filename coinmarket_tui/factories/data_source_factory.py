"""Factory for creating market data sources based on configuration."""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from coinmarket_tui.contracts.config import ConfigProtocol

from coinmarket_tui.contracts.market_data import MarketDataSource
from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.platforms import BinanceMarketSource, CoinGeckoMarketSource, MockMarketSource


class DataSourceFactory:
    """
    Factory for creating MarketDataSource instances from configuration.

    Usage:
        factory = DataSourceFactory(logger, config)
        source = factory.create()            # provider from config
        source = factory.create("mock")      # explicit provider
    """

    def __init__(self, logger: Logger, config: "ConfigProtocol"):
        self.logger = logger
        self.config = config

    def create(self, provider: Optional[str] = None) -> MarketDataSource:
        """
        Create the data source for ``provider`` (defaults to config.PROVIDER).

        Raises:
            ValueError: If the provider name is not supported
        """
        name = (provider or self.config.PROVIDER).strip().lower()
        builders = {
            "binance": self.create_binance_source,
            "coingecko": self.create_coingecko_source,
            "mock": self.create_mock_source,
        }
        builder = builders.get(name)
        if builder is None:
            valid = ", ".join(f'"{p}"' for p in sorted(builders))
            raise ValueError(f"Unsupported market data provider '{name}'. Supported values are: {valid}.")
        source = builder()
        self.logger.info(f"Market data source initialized: {source.name}")
        return source

    def create_binance_source(self) -> BinanceMarketSource:
        return BinanceMarketSource(
            self.logger,
            base_url=self.config.BINANCE_BASE_URL,
            quote_asset=self.config.BINANCE_QUOTE_ASSET,
            symbols=self.config.BINANCE_SYMBOLS or None,
            limit=self.config.BINANCE_LIMIT,
            api_key=self.config.BINANCE_API_KEY,
            timeout=self.config.FETCH_TIMEOUT,
        )

    def create_coingecko_source(self) -> CoinGeckoMarketSource:
        return CoinGeckoMarketSource(
            self.logger,
            base_url=self.config.COINGECKO_BASE_URL,
            vs_currency=self.config.COINGECKO_VS_CURRENCY,
            per_page=self.config.COINGECKO_PER_PAGE,
            api_key=self.config.COINGECKO_API_KEY,
            timeout=self.config.FETCH_TIMEOUT,
        )

    def create_mock_source(self) -> MockMarketSource:
        return MockMarketSource(
            self.logger,
            seed=self.config.MOCK_SEED,
            symbols=self.config.MOCK_SYMBOLS or None,
            failure_rate=self.config.MOCK_FAILURE_RATE,
        )
