import asyncio
from typing import Optional

from coinmarket_tui.contracts.terminal import TerminalProtocol
from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.ui.keys import KeyEvent
from coinmarket_tui.ui.terminal import TerminalError


class KeyboardHandler:
    """Polls the terminal for key presses and forwards them to the app loop.

    Decoded KeyEvents are put on a queue consumed only by the app loop; the
    handler itself never interprets keys.
    """

    def __init__(self, terminal: TerminalProtocol, events: "asyncio.Queue[KeyEvent]",
                 logger: Optional[Logger] = None, poll_interval: float = 0.02,
                 max_repeats: int = 2):
        """Initialize the keyboard handler

        Args:
            terminal: Terminal to read keys from
            events: Queue receiving decoded key events
            logger: Optional logger instance
            poll_interval: Seconds to sleep between polls when no input is pending
            max_repeats: Queued events a repeated key may occupy before further
                repeats are dropped, so auto-repeat cannot bury later keys
        """
        self.terminal = terminal
        self.events = events
        self.logger = logger
        self.poll_interval = poll_interval
        self.max_repeats = max_repeats
        self._last_event: Optional[KeyEvent] = None
        self.running = False
        self.failure: Optional[TerminalError] = None

    async def start_listening(self) -> None:
        """Start listening for keyboard input until stopped or the terminal fails"""
        if self.running:
            return

        self.running = True

        if self.logger:
            self.logger.debug("Keyboard handler started")

        while self.running:
            try:
                self._process_keyboard_input()
                await asyncio.sleep(self.poll_interval)
            except asyncio.CancelledError:
                if self.logger:
                    self.logger.debug("Keyboard listener task cancelled")
                break
            except TerminalError as e:
                self.failure = e
                self.running = False
                if self.logger:
                    self.logger.error(f"Keyboard input failed: {e}")

    def _process_keyboard_input(self) -> None:
        """Forward buffered input, dropping auto-repeat beyond the repeat allowance."""
        while self.running:
            event = self.terminal.read_key(timeout=0)
            if event is None:
                return
            if event == self._last_event and self.events.qsize() >= self.max_repeats:
                continue
            self._last_event = event
            self.events.put_nowait(event)

    def stop_listening(self) -> None:
        """Stop listening for keyboard input"""
        self.running = False
        if self.logger:
            self.logger.debug("Keyboard handler stopped")
