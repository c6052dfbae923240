"""Shared builders and fakes for the test suite."""
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

from coinmarket_tui.models.ticker import TickerRecord
from coinmarket_tui.ui.keys import KeyEvent
from coinmarket_tui.ui.terminal import TerminalError

FIXED_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(symbol: str, price: float = 1.0, change_pct: float = 0.0,
                volume: float = 0.0) -> TickerRecord:
    return TickerRecord(symbol=symbol, price=price, change_pct=change_pct,
                        volume=volume, updated_at=FIXED_TIME)


class FakeTerminal:
    """In-memory terminal: scripted key presses, captured frames."""

    def __init__(self, keys: Optional[List[Optional[str]]] = None, size: Tuple[int, int] = (100, 30),
                 fail_on_enter: bool = False, fail_on_draw: bool = False):
        self.script = list(keys or [])
        self._size = size
        self.fail_on_enter = fail_on_enter
        self.fail_on_draw = fail_on_draw
        self.entered = False
        self.exited = False
        self.frames = []

    def enter(self) -> None:
        if self.fail_on_enter:
            raise TerminalError("not a tty")
        self.entered = True

    def exit(self) -> None:
        self.exited = True

    def read_key(self, timeout: float = 0.0) -> Optional[KeyEvent]:
        if not self.script:
            return None
        key = self.script.pop(0)
        return KeyEvent(key) if key is not None else None

    def draw(self, frame) -> None:
        if self.fail_on_draw:
            raise TerminalError("broken pipe")
        self.frames.append(frame)

    @property
    def size(self) -> Tuple[int, int]:
        return self._size


def mock_session_returning(payload, status=200, headers=None):
    """aiohttp.ClientSession stand-in whose get() yields one canned response."""
    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.headers = headers or {}
    mock_resp.json.return_value = payload

    mock_get_ctx = AsyncMock()
    mock_get_ctx.__aenter__.return_value = mock_resp

    mock_session_instance = MagicMock()
    mock_session_instance.closed = False
    mock_session_instance.get = MagicMock(return_value=mock_get_ctx)
    mock_session_instance.close = AsyncMock()
    return mock_session_instance
