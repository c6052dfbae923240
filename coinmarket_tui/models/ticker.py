"""Dataclasses for ticker snapshots and refresh cycles."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class TickerRecord:
    """One tracked asset's market snapshot as returned by a data source.

    Records are never mutated; every fetch builds fresh instances.
    """
    symbol: str                      # Unique identifier (e.g. BTCUSDT)
    price: float                     # Last traded price
    change_pct: float                # 24h percent change
    volume: float                    # 24h volume, quote currency when available
    updated_at: datetime             # Provider timestamp (UTC)


class FetchErrorKind(Enum):
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    PARSE = "parse"
    TIMEOUT = "timeout"


class FetchError(Exception):
    """Non-fatal failure of a single market data fetch."""

    def __init__(self, kind: FetchErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FetchError):
            return NotImplemented
        return self.kind is other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))

    def __repr__(self) -> str:
        return f"FetchError({self.kind.name}, {self.message!r})"

    def describe(self) -> str:
        """Short label for the status line."""
        label = self.kind.name.replace("_", " ").title()
        if self.message and self.message != self.kind.value:
            return f"{label}: {self.message}"
        return label


class RefreshStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class RefreshCycle:
    """One fetch attempt tagged with its generation.

    Only the outcome of the newest generation may reach MarketState.
    """
    generation: int
    started_at: datetime
    status: RefreshStatus = RefreshStatus.PENDING
    records: Tuple[TickerRecord, ...] = ()
    error: Optional[FetchError] = None

    @classmethod
    def pending(cls, generation: int, started_at: datetime) -> 'RefreshCycle':
        return cls(generation=generation, started_at=started_at)

    def succeeded(self, records) -> 'RefreshCycle':
        return RefreshCycle(
            generation=self.generation,
            started_at=self.started_at,
            status=RefreshStatus.SUCCESS,
            records=tuple(records),
        )

    def failed(self, error: FetchError) -> 'RefreshCycle':
        return RefreshCycle(
            generation=self.generation,
            started_at=self.started_at,
            status=RefreshStatus.FAILURE,
            error=error,
        )

    @property
    def is_success(self) -> bool:
        return self.status is RefreshStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status is RefreshStatus.FAILURE
