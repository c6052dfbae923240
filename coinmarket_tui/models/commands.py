"""User intents produced by the input router and consumed by the app loop."""

from dataclasses import dataclass
from typing import Union

from coinmarket_tui.models.sorting import SortKey


@dataclass(frozen=True, slots=True)
class MoveSelection:
    delta: int


@dataclass(frozen=True, slots=True)
class ChangeSort:
    key: SortKey


@dataclass(frozen=True, slots=True)
class ToggleSortDirection:
    pass


@dataclass(frozen=True, slots=True)
class ForceRefresh:
    pass


@dataclass(frozen=True, slots=True)
class Quit:
    pass


@dataclass(frozen=True, slots=True)
class CycleTheme:
    step: int


@dataclass(frozen=True, slots=True)
class BeginSearch:
    pass


@dataclass(frozen=True, slots=True)
class SearchInput:
    text: str


@dataclass(frozen=True, slots=True)
class SearchErase:
    pass


@dataclass(frozen=True, slots=True)
class CommitSearch:
    pass


@dataclass(frozen=True, slots=True)
class CancelSearch:
    pass


@dataclass(frozen=True, slots=True)
class ClearFilter:
    pass


Command = Union[
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
]
