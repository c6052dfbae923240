import os
import sys
from typing import Optional, Tuple

from rich.console import Console, RenderableType
from rich.live import Live

from coinmarket_tui.ui.keys import KeyEvent, decode_sequence, decode_windows_scan_code, split_sequence

# Platform-specific imports
if sys.platform == "win32":
    import msvcrt
else:
    import select
    import termios
    import tty

_TERMINAL_ERRORS = (OSError, ValueError) if sys.platform == "win32" else (OSError, ValueError, termios.error)


class TerminalError(RuntimeError):
    """Fatal terminal failure (raw mode setup, read or write)."""
    pass


class RichTerminal:
    """Full-screen rich Live surface with cbreak key input.

    ``exit`` always restores the tty settings captured by ``enter`` and may be
    called more than once.
    """

    def __init__(self, console: Optional[Console] = None, stdin=None):
        self.console = console or Console()
        self.stdin = stdin or sys.stdin
        self._live: Optional[Live] = None
        self._old_settings = None
        self._pending = ""

    def enter(self) -> None:
        if not self.console.is_terminal or not self.stdin.isatty():
            raise TerminalError("CoinMarket TUI needs an interactive terminal (stdin and stdout must be a TTY)")
        try:
            if sys.platform != "win32":
                fd = self.stdin.fileno()
                self._old_settings = termios.tcgetattr(fd)
                tty.setcbreak(fd)
            self._live = Live(console=self.console, screen=True, auto_refresh=False, transient=True)
            self._live.start()
        except _TERMINAL_ERRORS as e:
            self.exit()
            raise TerminalError(f"Unable to prepare terminal: {e}") from e

    def exit(self) -> None:
        live, self._live = self._live, None
        try:
            if live is not None:
                live.stop()
        except _TERMINAL_ERRORS as e:
            raise TerminalError(f"Unable to leave alternate screen: {e}") from e
        finally:
            if self._old_settings is not None and sys.platform != "win32":
                settings, self._old_settings = self._old_settings, None
                try:
                    termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, settings)
                except _TERMINAL_ERRORS as e:
                    raise TerminalError(f"Unable to restore terminal mode: {e}") from e

    def read_key(self, timeout: float = 0.0) -> Optional[KeyEvent]:
        """Return the next key event, waiting at most ``timeout`` seconds."""
        try:
            if not self._pending:
                self._pending = self._read_raw(timeout)
        except OSError as e:
            raise TerminalError(f"Error reading keyboard input: {e}") from e
        if not self._pending:
            return None
        if sys.platform == "win32" and self._pending[0] in ("\x00", "\xe0"):
            code, self._pending = self._pending[1:2], self._pending[2:]
            return decode_windows_scan_code(code)
        sequence, self._pending = split_sequence(self._pending)
        return decode_sequence(sequence)

    def _read_raw(self, timeout: float) -> str:
        if sys.platform == "win32":
            if not msvcrt.kbhit():
                return ""
            char = msvcrt.getwch()
            if char in ("\x00", "\xe0"):
                return char + msvcrt.getwch()
            return char

        fd = self.stdin.fileno()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return ""
        data = os.read(fd, 64)
        if not data:
            raise TerminalError("Keyboard input stream closed")
        return data.decode("utf-8", errors="ignore")

    def draw(self, frame: RenderableType) -> None:
        if self._live is None:
            raise TerminalError("Terminal is not active")
        try:
            self._live.update(frame, refresh=True)
        except OSError as e:
            raise TerminalError(f"Error writing frame: {e}") from e

    @property
    def size(self) -> Tuple[int, int]:
        width, height = self.console.size
        return width, height
