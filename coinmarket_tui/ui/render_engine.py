"""
Projection of a MarketSnapshot into a terminal frame.

The engine holds no per-frame state: the same snapshot and viewport always
produce the same renderable, and therefore the same bytes.
"""
import io
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from coinmarket_tui.models.sorting import SortDirection, SortKey
from coinmarket_tui.models.ticker import TickerRecord
from coinmarket_tui.state.market_state import MarketSnapshot
from coinmarket_tui.ui.input_router import HELP_TEXT
from coinmarket_tui.ui.themes import DOWN_COLOR, FLAT_COLOR, UP_COLOR, TableColors, palette_for
from coinmarket_tui.utils.format_utils import FormatUtils

# Table header line plus the footer panel (two unwrapped text lines inside a border)
FOOTER_LINES = 4
CHROME_LINES = 1 + FOOTER_LINES
HIGHLIGHT_SYMBOL = "█"

_COLUMNS: Tuple[Tuple[str, Optional[SortKey], str], ...] = (
    ("Symbol", SortKey.BY_NAME, "left"),
    ("Price", SortKey.BY_PRICE, "right"),
    ("24h %", SortKey.BY_CHANGE, "right"),
    ("Volume", SortKey.BY_VOLUME, "right"),
)


def visible_window(selected: Optional[int], total: int, capacity: int) -> Tuple[int, int]:
    """Return the [start, end) slice of rows that keeps the selection on screen."""
    capacity = max(1, capacity)
    if total <= capacity:
        return 0, total
    anchor = selected or 0
    start = min(max(0, anchor - capacity // 2), total - capacity)
    return start, start + capacity


class RenderEngine:
    """Builds the dashboard frame: ticker table and status footer."""

    def __init__(self, formatter: Optional[FormatUtils] = None):
        self.formatter = formatter or FormatUtils()

    def render(self, snapshot: MarketSnapshot, height: int) -> RenderableType:
        colors = palette_for(snapshot.theme_index)
        capacity = max(1, height - CHROME_LINES)
        table = self._build_table(snapshot, colors, capacity)
        if snapshot.search_draft is not None:
            footer = self._build_search_box(snapshot.search_draft)
        else:
            footer = self._build_footer(snapshot, colors)
        return Group(table, footer)

    def render_text(self, snapshot: MarketSnapshot, width: int = 100, height: int = 30) -> str:
        """Render to an ANSI string, used for tests and non-interactive output."""
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=width,
            height=height,
            force_terminal=True,
            color_system="truecolor",
            legacy_windows=False,
        )
        console.print(self.render(snapshot, height))
        return buffer.getvalue()

    # ----- table -----

    def _build_table(self, snapshot: MarketSnapshot, colors: TableColors, capacity: int) -> Table:
        table = Table(
            expand=True,
            box=None,
            padding=(0, 1),
            show_edge=False,
            style=Style(bgcolor=colors.buffer_bg),
            header_style=Style(color=colors.header_fg, bgcolor=colors.header_bg, bold=True),
        )
        table.add_column("", width=1, no_wrap=True)
        for title, key, justify in _COLUMNS:
            table.add_column(self._column_title(title, key, snapshot), justify=justify, no_wrap=True)

        if not snapshot.records:
            placeholder = "No tickers match the filter" if snapshot.total_count else "Waiting for market data…"
            table.add_row("", Text(placeholder, style=Style(color=colors.row_fg, italic=True)), "", "", "")
            return table

        start, end = visible_window(snapshot.selected, len(snapshot.records), capacity)
        for index in range(start, end):
            record = snapshot.records[index]
            selected = index == snapshot.selected
            table.add_row(*self._build_row(record, snapshot, colors, selected),
                          style=self._row_style(index, selected, colors))
        return table

    @staticmethod
    def _column_title(title: str, key: Optional[SortKey], snapshot: MarketSnapshot) -> str:
        if key is not snapshot.sort_key:
            return title
        arrow = "▲" if snapshot.sort_direction is SortDirection.ASCENDING else "▼"
        return f"{title} {arrow}"

    @staticmethod
    def _row_style(index: int, selected: bool, colors: TableColors) -> Style:
        if selected:
            return Style(color=colors.selected_fg, reverse=True, bold=True)
        background = colors.normal_row_bg if index % 2 == 0 else colors.alt_row_bg
        return Style(color=colors.row_fg, bgcolor=background)

    def _build_row(self, record: TickerRecord, snapshot: MarketSnapshot,
                   colors: TableColors, selected: bool) -> List[Text]:
        marker = Text(HIGHLIGHT_SYMBOL if selected else " ")
        previous = snapshot.previous.get(record.symbol)
        price_color, arrow = self._price_direction(record, previous)
        price = Text(f"{self.formatter.fmt_price(record.price)} {arrow}", style=Style(color=price_color))

        if record.change_pct > 0:
            change_color = UP_COLOR
        elif record.change_pct < 0:
            change_color = DOWN_COLOR
        else:
            change_color = FLAT_COLOR
        change = Text(self.formatter.fmt_pct(record.change_pct), style=Style(color=change_color))
        volume = Text(self.formatter.fmt_volume(record.volume))
        return [marker, Text(record.symbol), price, change, volume]

    @staticmethod
    def _price_direction(record: TickerRecord, previous: Optional[TickerRecord]) -> Tuple[str, str]:
        """Colour and arrow for the price move since the previous fetch."""
        if previous is None or previous.price == record.price:
            return FLAT_COLOR, " "
        if record.price > previous.price:
            return UP_COLOR, "▲"
        return DOWN_COLOR, "▼"

    # ----- footer -----

    def _status_line(self, snapshot: MarketSnapshot) -> Text:
        status = Text()
        status.append(f"Updated {self.formatter.fmt_time(snapshot.last_refresh)}")
        status.append(f" | {len(snapshot.records)}/{snapshot.total_count} pairs")
        if snapshot.filter_text:
            status.append(f" | filter: {snapshot.filter_text}")
        if snapshot.last_error is not None:
            status.append(" | ")
            status.append(f"⚠ {snapshot.last_error.describe()}", style=Style(color=DOWN_COLOR, bold=True))
        return status

    def _build_footer(self, snapshot: MarketSnapshot, colors: TableColors) -> Panel:
        body = Text(justify="center", no_wrap=True, overflow="ellipsis")
        body.append_text(self._status_line(snapshot))
        body.append("\n")
        body.append(HELP_TEXT)
        return Panel(
            body,
            box=box.DOUBLE,
            border_style=Style(color=colors.footer_border),
            style=Style(color=colors.row_fg, bgcolor=colors.buffer_bg),
        )

    @staticmethod
    def _build_search_box(draft: str) -> Panel:
        body = Text(draft, style=Style(color="yellow"), no_wrap=True, overflow="ellipsis")
        body.append(HIGHLIGHT_SYMBOL)
        body.append("\n")
        body.append("BTC/ETH/AKT: one coin prefix, Enter to apply, Esc to cancel", style=Style(dim=True))
        return Panel(
            body,
            title="Coin Search",
            border_style=Style(color="bright_blue"),
        )
