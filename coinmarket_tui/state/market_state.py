"""Authoritative in-memory view of all tracked tickers.

Everything here is synchronous and free of I/O. The app loop is the only
caller that mutates a MarketState; the render path only ever sees the
immutable MarketSnapshot returned by ``snapshot()``.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from coinmarket_tui.models.commands import (
    BeginSearch,
    CancelSearch,
    ChangeSort,
    ClearFilter,
    Command,
    CommitSearch,
    CycleTheme,
    MoveSelection,
    SearchErase,
    SearchInput,
    ToggleSortDirection,
)
from coinmarket_tui.models.sorting import SortDirection, SortKey
from coinmarket_tui.models.ticker import FetchError, TickerRecord

_PRIMARY_KEYS = {
    SortKey.BY_NAME: lambda r: r.symbol,
    SortKey.BY_PRICE: lambda r: r.price,
    SortKey.BY_CHANGE: lambda r: r.change_pct,
    SortKey.BY_VOLUME: lambda r: r.volume,
}


def sort_records(records: Iterable[TickerRecord], key: SortKey,
                 direction: SortDirection) -> Tuple[TickerRecord, ...]:
    """Order records by the primary key, ties broken by ascending symbol.

    The identifier pass runs first and Python's sort is stable (also with
    ``reverse=True``), so equal primary values keep ascending symbol order
    in both directions.
    """
    by_symbol = sorted(records, key=lambda r: r.symbol)
    descending = direction is SortDirection.DESCENDING
    return tuple(sorted(by_symbol, key=_PRIMARY_KEYS[key], reverse=descending))


def matches_filter(record: TickerRecord, filter_text: str) -> bool:
    return not filter_text or record.symbol.upper().startswith(filter_text.upper())


def _clamp(index: int, length: int) -> Optional[int]:
    if length <= 0:
        return None
    return max(0, min(index, length - 1))


@dataclass(frozen=True)
class MarketSnapshot:
    """Read-only copy of MarketState handed to the renderer."""
    records: Tuple[TickerRecord, ...] = ()
    previous: Mapping[str, TickerRecord] = field(default_factory=lambda: MappingProxyType({}))
    sort_key: SortKey = SortKey.BY_NAME
    sort_direction: SortDirection = SortDirection.ASCENDING
    selected: Optional[int] = None
    generation: int = 0
    last_refresh: Optional[datetime] = None
    last_error: Optional[FetchError] = None
    filter_text: str = ""
    search_draft: Optional[str] = None
    theme_index: int = 0
    total_count: int = 0

    @property
    def selected_symbol(self) -> Optional[str]:
        if self.selected is None:
            return None
        return self.records[self.selected].symbol


class MarketState:
    """Current tickers, their previous values, sort order and selection.

    Invariants kept at every mutation site:
      * ``selected`` is None exactly when there are no visible records,
        otherwise it indexes into ``records``.
      * ``previous`` only holds symbols present in both of the last two fetches.
      * a refresh tagged with a generation not newer than ``generation`` is ignored.
    """

    def __init__(
        self,
        sort_key: SortKey = SortKey.BY_NAME,
        sort_direction: SortDirection = SortDirection.ASCENDING,
        filter_text: str = "",
        theme_index: int = 0,
        theme_count: int = 1,
    ) -> None:
        self.sort_key = sort_key
        self.sort_direction = sort_direction
        self.filter_text = filter_text.strip().upper()
        self.search_draft: Optional[str] = None
        self.theme_count = max(1, theme_count)
        self.theme_index = theme_index % self.theme_count
        self.records: Tuple[TickerRecord, ...] = ()
        self.previous: Dict[str, TickerRecord] = {}
        self.selected: Optional[int] = None
        self.generation = 0
        self.last_refresh: Optional[datetime] = None
        self.last_error: Optional[FetchError] = None
        self._all_records: Tuple[TickerRecord, ...] = ()

    @property
    def selected_symbol(self) -> Optional[str]:
        if self.selected is None:
            return None
        return self.records[self.selected].symbol

    @property
    def total_count(self) -> int:
        return len(self._all_records)

    @property
    def is_searching(self) -> bool:
        return self.search_draft is not None

    # ----- refresh results -----

    def apply_refresh(self, records: Iterable[TickerRecord], generation: int,
                      at: Optional[datetime] = None) -> bool:
        """Replace the current records with a newer fetch.

        Returns False (and leaves the state untouched) for stale generations.
        """
        if generation <= self.generation:
            return False

        # Symbols are unique; a duplicate from the provider keeps its last occurrence.
        incoming = tuple({r.symbol: r for r in records}.values())
        incoming_symbols = {r.symbol for r in incoming}
        self.previous = {r.symbol: r for r in self._all_records if r.symbol in incoming_symbols}
        self._all_records = incoming

        self._rebuild(anchor=self.selected_symbol, fallback=self.selected)
        self.generation = generation
        self.last_refresh = at or datetime.now(timezone.utc)
        self.last_error = None
        return True

    def apply_failure(self, error: FetchError, generation: int) -> bool:
        """Surface a failed fetch in the status line; data stays as it was."""
        if generation <= self.generation:
            return False
        self.last_error = error
        return True

    # ----- user commands -----

    def apply_command(self, command: Command) -> bool:
        """Apply a user command. Returns True when the view changed.

        ForceRefresh and Quit are handled by the app loop and leave the state alone.
        """
        if isinstance(command, MoveSelection):
            return self._move_selection(command.delta)
        if isinstance(command, ChangeSort):
            return self._resort(command.key, self.sort_direction)
        if isinstance(command, ToggleSortDirection):
            return self._resort(self.sort_key, self.sort_direction.toggled())
        if isinstance(command, CycleTheme):
            self.theme_index = (self.theme_index + command.step) % self.theme_count
            return True
        return self._apply_search_command(command)

    def _move_selection(self, delta: int) -> bool:
        if self.selected is None:
            return False
        target = _clamp(self.selected + delta, len(self.records))
        changed = target != self.selected
        self.selected = target
        return changed

    def _resort(self, key: SortKey, direction: SortDirection) -> bool:
        self.sort_key = key
        self.sort_direction = direction
        before = self.records
        self._rebuild(anchor=self.selected_symbol, fallback=self.selected)
        return before != self.records

    def _apply_search_command(self, command: Command) -> bool:
        if isinstance(command, BeginSearch):
            self.search_draft = self.filter_text
            return True
        if isinstance(command, ClearFilter):
            return self._set_filter("")
        if self.search_draft is None:
            return False
        if isinstance(command, SearchInput):
            self.search_draft += command.text.upper()
            return True
        if isinstance(command, SearchErase):
            self.search_draft = self.search_draft[:-1]
            return True
        if isinstance(command, CommitSearch):
            draft = self.search_draft
            self.search_draft = None
            self._set_filter(draft)
            return True
        if isinstance(command, CancelSearch):
            self.search_draft = None
            return True
        return False

    def _set_filter(self, text: str) -> bool:
        text = text.strip().upper()
        if text == self.filter_text:
            return False
        self.filter_text = text
        self._rebuild(anchor=self.selected_symbol, fallback=self.selected)
        return True

    # ----- projection -----

    def _rebuild(self, anchor: Optional[str], fallback: Optional[int]) -> None:
        visible = [r for r in self._all_records if matches_filter(r, self.filter_text)]
        self.records = sort_records(visible, self.sort_key, self.sort_direction)

        if anchor is not None:
            for index, record in enumerate(self.records):
                if record.symbol == anchor:
                    self.selected = index
                    return
        self.selected = _clamp(fallback or 0, len(self.records))

    def snapshot(self) -> MarketSnapshot:
        return MarketSnapshot(
            records=self.records,
            previous=MappingProxyType(dict(self.previous)),
            sort_key=self.sort_key,
            sort_direction=self.sort_direction,
            selected=self.selected,
            generation=self.generation,
            last_refresh=self.last_refresh,
            last_error=self.last_error,
            filter_text=self.filter_text,
            search_draft=self.search_draft,
            theme_index=self.theme_index,
            total_count=self.total_count,
        )
