from typing import Dict, Iterable, Mapping, Optional

from coinmarket_tui.models.commands import (
    BeginSearch,
    CancelSearch,
    ChangeSort,
    ClearFilter,
    Command,
    CommitSearch,
    CycleTheme,
    ForceRefresh,
    MoveSelection,
    Quit,
    SearchErase,
    SearchInput,
    ToggleSortDirection,
)
from coinmarket_tui.models.sorting import SortKey
from coinmarket_tui.ui import keys

PAGE_SIZE = 10

ACTIONS: Dict[str, Command] = {
    "quit": Quit(),
    "down": MoveSelection(1),
    "up": MoveSelection(-1),
    "page_down": MoveSelection(PAGE_SIZE),
    "page_up": MoveSelection(-PAGE_SIZE),
    "sort_name": ChangeSort(SortKey.BY_NAME),
    "sort_price": ChangeSort(SortKey.BY_PRICE),
    "sort_change": ChangeSort(SortKey.BY_CHANGE),
    "sort_volume": ChangeSort(SortKey.BY_VOLUME),
    "toggle_direction": ToggleSortDirection(),
    "refresh": ForceRefresh(),
    "next_theme": CycleTheme(1),
    "previous_theme": CycleTheme(-1),
    "search": BeginSearch(),
    "clear_filter": ClearFilter(),
}

DEFAULT_BINDINGS: Dict[str, tuple] = {
    "quit": ("q", keys.ESCAPE, keys.CTRL_C),
    "down": ("j", keys.DOWN),
    "up": ("k", keys.UP),
    "page_down": (keys.PAGE_DOWN,),
    "page_up": (keys.PAGE_UP,),
    "sort_name": ("1",),
    "sort_price": ("2",),
    "sort_change": ("3",),
    "sort_volume": ("4",),
    "toggle_direction": ("d",),
    "refresh": ("r",),
    "next_theme": ("l", keys.RIGHT),
    "previous_theme": ("h", keys.LEFT),
    "search": ("s", "/"),
    "clear_filter": ("c",),
}

HELP_TEXT = (
    "(q) quit | (↑/↓) move | (1-4) sort name/price/change/volume | (d) direction | "
    "(r) refresh | (←/→) colour | (s) search | (c) clear filter"
)


class InputRouter:
    """Maps decoded key events to Commands.

    Stateless apart from the keymap: the caller says whether the search box
    is open, and only the app loop ever applies the returned Command.
    """

    def __init__(self, overrides: Optional[Mapping[str, Iterable[str]]] = None):
        """
        Args:
            overrides: Optional action name -> keys mapping replacing the default
                bindings of those actions (e.g. {"refresh": ["r", "f5"]}).
        """
        bindings = dict(DEFAULT_BINDINGS)
        for action, bound_keys in (overrides or {}).items():
            if action not in ACTIONS:
                raise ValueError(f"Unknown key binding action '{action}'")
            if isinstance(bound_keys, str):
                bound_keys = [bound_keys]
            bindings[action] = tuple(bound_keys)

        self._keymap: Dict[str, Command] = {}
        for action, bound_keys in bindings.items():
            for key in bound_keys:
                self._keymap[key] = ACTIONS[action]

    @property
    def keymap(self) -> Mapping[str, Command]:
        return dict(self._keymap)

    def route(self, event: Optional[keys.KeyEvent], searching: bool = False) -> Optional[Command]:
        """Translate one key event. Unrecognized keys give None."""
        if event is None:
            return None
        if searching:
            return self._route_search(event)
        return self._keymap.get(event.key)

    @staticmethod
    def _route_search(event: keys.KeyEvent) -> Optional[Command]:
        if event.key == keys.ENTER:
            return CommitSearch()
        if event.key in (keys.ESCAPE, keys.CTRL_C):
            return CancelSearch()
        if event.key == keys.BACKSPACE:
            return SearchErase()
        if event.is_char and (event.key.isalnum() or event.key in "-_"):
            return SearchInput(event.key)
        return None
