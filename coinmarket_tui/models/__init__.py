"""Value types shared across the dashboard."""
from .ticker import TickerRecord, FetchError, FetchErrorKind, RefreshCycle, RefreshStatus
from .sorting import SortKey, SortDirection
from .commands import (
    Command,
    MoveSelection,
    ChangeSort,
    ToggleSortDirection,
    ForceRefresh,
    Quit,
    CycleTheme,
    BeginSearch,
    SearchInput,
    SearchErase,
    CommitSearch,
    CancelSearch,
    ClearFilter,
)

__all__ = [
    'TickerRecord', 'FetchError', 'FetchErrorKind', 'RefreshCycle', 'RefreshStatus',
    'SortKey', 'SortDirection',
    'Command', 'MoveSelection', 'ChangeSort', 'ToggleSortDirection', 'ForceRefresh', 'Quit',
    'CycleTheme', 'BeginSearch', 'SearchInput', 'SearchErase', 'CommitSearch', 'CancelSearch',
    'ClearFilter',
]
