"""
Terminal Protocol - what the app loop needs from a terminal driver.

The core only reads one key event with a timeout and draws whole frames.
"""

from typing import Optional, Protocol, Tuple

from rich.console import RenderableType

from coinmarket_tui.ui.keys import KeyEvent


class TerminalProtocol(Protocol):
    """Raw-mode key input plus a full-screen frame surface."""

    def enter(self) -> None:
        """Switch to raw input and the alternate screen."""
        ...

    def exit(self) -> None:
        """Restore the terminal to the state found by ``enter``."""
        ...

    def read_key(self, timeout: float = 0.0) -> Optional[KeyEvent]:
        ...

    def draw(self, frame: RenderableType) -> None:
        ...

    @property
    def size(self) -> Tuple[int, int]:
        """Current (width, height) in cells."""
        ...
