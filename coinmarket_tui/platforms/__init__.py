"""Market data source adapters."""
from .base import HTTPMarketSource, classify_fetch_error
from .binance import BinanceMarketSource
from .coingecko import CoinGeckoMarketSource
from .mock import MockMarketSource

__all__ = [
    'HTTPMarketSource', 'classify_fetch_error',
    'BinanceMarketSource', 'CoinGeckoMarketSource', 'MockMarketSource',
]
