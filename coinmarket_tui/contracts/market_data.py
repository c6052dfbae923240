"""
Market data source Protocol - the boundary every provider adapter implements.

Adapters must bound their own fetch duration; the scheduler never cancels a
fetch, it only supersedes its result with a newer generation.
"""

from typing import List, Protocol, runtime_checkable

from coinmarket_tui.models.ticker import TickerRecord


@runtime_checkable
class MarketDataSource(Protocol):
    """Protocol for providers returning a snapshot of ticker records."""

    name: str

    async def fetch(self) -> List[TickerRecord]:
        """Fetch one snapshot.

        Raises:
            FetchError: with kind NETWORK, RATE_LIMITED, PARSE or TIMEOUT
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the source."""
        ...
