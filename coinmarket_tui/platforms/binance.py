"""
Binance adapter
───────────────
Polls the public 24hr ticker endpoint and keeps the pairs quoted in one asset
(USDT by default). Works without an API key; a configured key is sent as
``X-MBX-APIKEY``.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind, TickerRecord
from coinmarket_tui.platforms.base import DEFAULT_TIMEOUT, HTTPMarketSource, to_finite_float

DEFAULT_BASE_URL = "https://api.binance.com"
TICKER_24HR_ENDPOINT = "/api/v3/ticker/24hr"

# Binance error code for exceeding the request weight limit
_WEIGHT_LIMIT_CODE = -1003


class BinanceMarketSource(HTTPMarketSource):
    name = "binance"

    def __init__(
        self,
        logger: Logger,
        *,
        base_url: str = DEFAULT_BASE_URL,
        quote_asset: str = "USDT",
        symbols: Optional[Iterable[str]] = None,
        limit: int = 0,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Args:
            logger: Logger instance
            base_url: Binance API base URL
            quote_asset: Only pairs quoted in this asset are kept
            symbols: Optional watch list; bare coins (BTC) get the quote asset appended
            limit: Keep only the top N pairs by quote volume (0 keeps all)
            api_key: Optional API key for higher rate limits
            timeout: Upper bound for one fetch in seconds
            session: Optional pre-built aiohttp session
        """
        super().__init__(logger, timeout=timeout, session=session)
        self.base_url = base_url.rstrip("/")
        self.quote_asset = quote_asset.upper()
        self.symbols = frozenset(self._normalize_symbol(s) for s in (symbols or []) if s)
        self.limit = max(0, int(limit or 0))
        self.api_key = api_key

    def _normalize_symbol(self, symbol: str) -> str:
        symbol = symbol.strip().upper().replace("/", "")
        return symbol if symbol.endswith(self.quote_asset) else f"{symbol}{self.quote_asset}"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["X-MBX-APIKEY"] = self.api_key
        return headers

    async def _request_snapshot(self) -> Any:
        return await self._get_json(f"{self.base_url}{TICKER_24HR_ENDPOINT}")

    def _parse(self, payload: Any) -> List[TickerRecord]:
        if isinstance(payload, dict) and "code" in payload:
            kind = FetchErrorKind.RATE_LIMITED if payload.get("code") == _WEIGHT_LIMIT_CODE else FetchErrorKind.NETWORK
            raise FetchError(kind, f"Binance error {payload.get('code')}: {payload.get('msg', '')}")
        if not isinstance(payload, list):
            raise FetchError(FetchErrorKind.PARSE, f"unexpected payload type {type(payload).__name__}")

        records: List[TickerRecord] = []
        for item in payload:
            symbol = str(item["symbol"]).upper()
            if not symbol.endswith(self.quote_asset):
                continue
            if self.symbols and symbol not in self.symbols:
                continue
            price = to_finite_float(item["lastPrice"])
            if price <= 0:
                # Halted or delisted pairs still appear with a zero price
                continue
            volume = item.get("quoteVolume", item.get("volume", 0))
            records.append(TickerRecord(
                symbol=symbol,
                price=price,
                change_pct=to_finite_float(item["priceChangePercent"]),
                volume=to_finite_float(volume),
                updated_at=datetime.fromtimestamp(int(item["closeTime"]) / 1000, tz=timezone.utc),
            ))

        if self.limit:
            records = sorted(records, key=lambda r: r.volume, reverse=True)[:self.limit]
        return records
