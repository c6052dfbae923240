import asyncio
import unittest
from unittest.mock import MagicMock, patch

import aiohttp

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind
from coinmarket_tui.platforms.binance import BinanceMarketSource
from tests.helpers import mock_session_returning

TICKERS = [
    {"symbol": "BTCUSDT", "lastPrice": "50000.10", "priceChangePercent": "1.250",
     "quoteVolume": "2500000000.0", "volume": "50000.0", "closeTime": 1709294400000},
    {"symbol": "ETHUSDT", "lastPrice": "3000.00", "priceChangePercent": "-0.500",
     "quoteVolume": "900000000.0", "volume": "300000.0", "closeTime": 1709294400000},
    {"symbol": "ETHBTC", "lastPrice": "0.06", "priceChangePercent": "0.1",
     "quoteVolume": "100.0", "volume": "2000.0", "closeTime": 1709294400000},
    {"symbol": "LUNAUSDT", "lastPrice": "0.00000000", "priceChangePercent": "0.0",
     "quoteVolume": "0.0", "volume": "0.0", "closeTime": 1709294400000},
    {"symbol": "SOLUSDT", "lastPrice": "140.5", "priceChangePercent": "3.1",
     "quoteVolume": "400000000.0", "volume": "2800000.0", "closeTime": 1709294400000},
]


class TestBinanceMarketSource(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = MagicMock(spec=Logger)

    async def test_fetch_keeps_quote_asset_pairs(self):
        session = mock_session_returning(TICKERS)
        with patch('aiohttp.ClientSession', return_value=session) as MockSession:
            source = BinanceMarketSource(self.logger)
            records = await source.fetch()

            MockSession.assert_called_once()
            url = session.get.call_args.args[0]
            self.assertEqual(url, "https://api.binance.com/api/v3/ticker/24hr")

        self.assertEqual([r.symbol for r in records], ["BTCUSDT", "ETHUSDT", "SOLUSDT"])
        btc = records[0]
        self.assertAlmostEqual(btc.price, 50000.10)
        self.assertAlmostEqual(btc.change_pct, 1.25)
        self.assertAlmostEqual(btc.volume, 2.5e9)
        self.assertEqual(btc.updated_at.year, 2024)
        self.assertIsNotNone(btc.updated_at.tzinfo)

    async def test_watch_list_and_limit(self):
        session = mock_session_returning(TICKERS)
        with patch('aiohttp.ClientSession', return_value=session):
            watched = BinanceMarketSource(self.logger, symbols=["btc", "SOL/USDT"])
            self.assertEqual({r.symbol for r in await watched.fetch()}, {"BTCUSDT", "SOLUSDT"})

            top = BinanceMarketSource(self.logger, limit=2)
            self.assertEqual([r.symbol for r in await top.fetch()], ["BTCUSDT", "ETHUSDT"])

    async def test_api_key_header(self):
        source = BinanceMarketSource(self.logger, api_key="secret")
        self.assertEqual(source._headers()["X-MBX-APIKEY"], "secret")
        self.assertNotIn("X-MBX-APIKEY", BinanceMarketSource(self.logger)._headers())

    async def test_http_429_is_rate_limited(self):
        session = mock_session_returning({}, status=429, headers={"Retry-After": "30"})
        with patch('aiohttp.ClientSession', return_value=session):
            source = BinanceMarketSource(self.logger)
            with self.assertRaises(FetchError) as ctx:
                await source.fetch()
        self.assertIs(ctx.exception.kind, FetchErrorKind.RATE_LIMITED)
        self.assertIn("30", ctx.exception.message)
        self.logger.warning.assert_called()

    async def test_weight_limit_error_code_is_rate_limited(self):
        session = mock_session_returning({"code": -1003, "msg": "Too much request weight used"})
        with patch('aiohttp.ClientSession', return_value=session):
            with self.assertRaises(FetchError) as ctx:
                await BinanceMarketSource(self.logger).fetch()
        self.assertIs(ctx.exception.kind, FetchErrorKind.RATE_LIMITED)

    async def test_server_error_is_network(self):
        session = mock_session_returning({}, status=503)
        with patch('aiohttp.ClientSession', return_value=session):
            with self.assertRaises(FetchError) as ctx:
                await BinanceMarketSource(self.logger).fetch()
        self.assertIs(ctx.exception.kind, FetchErrorKind.NETWORK)

    async def test_malformed_payload_is_parse_error(self):
        for payload in ("not json", [{"symbol": "BTCUSDT"}], [{"symbol": "BTCUSDT", "lastPrice": "abc",
                                                               "priceChangePercent": "1", "closeTime": 0}]):
            session = mock_session_returning(payload)
            with patch('aiohttp.ClientSession', return_value=session):
                with self.assertRaises(FetchError) as ctx:
                    await BinanceMarketSource(self.logger).fetch()
            self.assertIs(ctx.exception.kind, FetchErrorKind.PARSE, payload)

    async def test_connection_error_is_network(self):
        session = mock_session_returning([])
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("connection refused"))
        with patch('aiohttp.ClientSession', return_value=session):
            with self.assertRaises(FetchError) as ctx:
                await BinanceMarketSource(self.logger).fetch()
        self.assertIs(ctx.exception.kind, FetchErrorKind.NETWORK)

    async def test_timeout_is_timeout(self):
        session = mock_session_returning([])
        session.get = MagicMock(side_effect=asyncio.TimeoutError())
        with patch('aiohttp.ClientSession', return_value=session):
            with self.assertRaises(FetchError) as ctx:
                await BinanceMarketSource(self.logger, timeout=1.0).fetch()
        self.assertIs(ctx.exception.kind, FetchErrorKind.TIMEOUT)

    async def test_session_reused_and_closed(self):
        session = mock_session_returning(TICKERS)
        with patch('aiohttp.ClientSession', return_value=session) as MockSession:
            source = BinanceMarketSource(self.logger)
            await source.fetch()
            await source.fetch()
            MockSession.assert_called_once()
            self.assertEqual(session.get.call_count, 2)

            await source.close()
            session.close.assert_awaited_once()
            self.assertIsNone(source.session)
