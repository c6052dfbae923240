from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind, TickerRecord
from coinmarket_tui.platforms.base import DEFAULT_TIMEOUT, HTTPMarketSource, to_finite_float


class CoinGeckoMarketSource(HTTPMarketSource):
    """Top coins by market cap from CoinGecko's ``/coins/markets`` endpoint."""
    name = "coingecko"

    DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"
    COINS_MARKETS_PATH = "/coins/markets"

    def __init__(
        self,
        logger: Logger,
        *,
        base_url: str = DEFAULT_BASE_URL,
        vs_currency: str = "usd",
        per_page: int = 100,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(logger, timeout=timeout, session=session)
        self.base_url = base_url.rstrip("/")
        self.vs_currency = vs_currency.lower()
        self.per_page = max(1, min(int(per_page), 250))
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def _request_snapshot(self) -> Any:
        params = {
            "vs_currency": self.vs_currency,
            "order": "market_cap_desc",
            "per_page": self.per_page,
            "page": 1,
            "price_change_percentage": "24h",
        }
        return await self._get_json(f"{self.base_url}{self.COINS_MARKETS_PATH}", params=params)

    def _parse(self, payload: Any) -> List[TickerRecord]:
        if isinstance(payload, dict):
            status = payload.get("status", {})
            message = status.get("error_message") if isinstance(status, dict) else None
            raise FetchError(FetchErrorKind.PARSE, message or "unexpected object payload")
        if not isinstance(payload, list):
            raise FetchError(FetchErrorKind.PARSE, f"unexpected payload type {type(payload).__name__}")

        records: List[TickerRecord] = []
        seen = set()
        for coin in payload:
            symbol = str(coin["symbol"]).upper()
            # Several tokens share a ticker; keep the one with the larger market cap
            if symbol in seen or coin.get("current_price") is None:
                continue
            seen.add(symbol)
            records.append(TickerRecord(
                symbol=symbol,
                price=to_finite_float(coin["current_price"]),
                change_pct=to_finite_float(coin.get("price_change_percentage_24h") or 0.0),
                volume=to_finite_float(coin.get("total_volume") or 0.0),
                updated_at=self._parse_timestamp(coin.get("last_updated")),
            ))
        return records

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> datetime:
        if not value:
            return datetime.now(timezone.utc)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
