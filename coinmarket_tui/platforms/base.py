import asyncio
import json
import math
import socket
from typing import Any, Dict, List, Optional

import aiohttp

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.ticker import FetchError, FetchErrorKind, TickerRecord

DEFAULT_TIMEOUT = 10.0

_RATE_LIMIT_STATUSES = {418, 429}
_RATE_LIMIT_PHRASES = {
    'too many requests', 'rate limit', 'ratelimit', 'too much request weight',
    'ddos protection', 'request weight'
}
_TIMEOUT_EXCEPTIONS = (asyncio.TimeoutError, TimeoutError, aiohttp.ServerTimeoutError)
_PARSE_EXCEPTIONS = (ValueError, KeyError, TypeError, IndexError, json.JSONDecodeError, aiohttp.ContentTypeError)
_NETWORK_EXCEPTIONS = (aiohttp.ClientError, ConnectionResetError, socket.gaierror, OSError)


def classify_fetch_error(e: Exception) -> FetchError:
    """Map a low-level exception onto the FetchError taxonomy."""
    if isinstance(e, FetchError):
        return e
    msg = str(e).lower()
    status = getattr(e, 'status', None)
    if status in _RATE_LIMIT_STATUSES or any(p in msg for p in _RATE_LIMIT_PHRASES):
        return FetchError(FetchErrorKind.RATE_LIMITED, str(e) or "rate limited")
    if isinstance(e, _TIMEOUT_EXCEPTIONS):
        return FetchError(FetchErrorKind.TIMEOUT, "request timed out")
    if isinstance(e, _PARSE_EXCEPTIONS):
        return FetchError(FetchErrorKind.PARSE, f"{type(e).__name__}: {e}")
    if isinstance(e, _NETWORK_EXCEPTIONS):
        return FetchError(FetchErrorKind.NETWORK, f"{type(e).__name__}: {e}" if str(e) else type(e).__name__)
    if 'timeout' in msg:
        return FetchError(FetchErrorKind.TIMEOUT, str(e))
    return FetchError(FetchErrorKind.NETWORK, f"{type(e).__name__}: {e}")


def to_finite_float(value: Any) -> float:
    """float() that rejects NaN and infinities, so sorting stays total."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value {value!r}")
    return number


class HTTPMarketSource:
    """Shared session handling and error mapping for REST market sources.

    Subclasses implement ``_request_snapshot`` (network) and ``_parse``
    (pure). ``fetch`` bounds the whole request by ``timeout`` and converts
    every failure into a FetchError; it never retries.
    """
    name = "http"

    def __init__(self, logger: Logger, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[aiohttp.ClientSession] = None) -> None:
        self.logger = logger
        self.timeout = timeout
        self.session = session

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": "CoinMarketTUI/1.0",
            "Accept": "application/json",
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self._headers(),
            )
        return self.session

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        session = self._get_session()
        async with session.get(url, params=params) as resp:
            if resp.status in _RATE_LIMIT_STATUSES:
                retry_after = resp.headers.get("Retry-After") if resp.headers else None
                detail = f"HTTP {resp.status}" + (f", retry after {retry_after}s" if retry_after else "")
                raise FetchError(FetchErrorKind.RATE_LIMITED, detail)
            if resp.status != 200:
                raise FetchError(FetchErrorKind.NETWORK, f"HTTP {resp.status}")
            return await resp.json(content_type=None)

    async def fetch(self) -> List[TickerRecord]:
        try:
            payload = await asyncio.wait_for(self._request_snapshot(), timeout=self.timeout)
            records = self._parse(payload)
        except asyncio.CancelledError:
            raise
        except FetchError as e:
            self.logger.warning(f"{self.name} fetch failed ({e.kind.name}): {e.message}")
            raise
        except Exception as e:
            error = classify_fetch_error(e)
            self.logger.warning(f"{self.name} fetch failed ({error.kind.name}): {error.message}")
            raise error from e
        self.logger.debug(f"{self.name} fetch returned {len(records)} tickers")
        return records

    async def _request_snapshot(self) -> Any:
        raise NotImplementedError

    def _parse(self, payload: Any) -> List[TickerRecord]:
        raise NotImplementedError

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
