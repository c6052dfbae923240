import asyncio
from enum import Enum
from typing import Optional

from coinmarket_tui.config.options import AppOptions
from coinmarket_tui.contracts.market_data import MarketDataSource
from coinmarket_tui.contracts.terminal import TerminalProtocol
from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.commands import Command, ForceRefresh, Quit
from coinmarket_tui.models.ticker import RefreshCycle
from coinmarket_tui.scheduler.refresh_scheduler import RefreshScheduler
from coinmarket_tui.state.market_state import MarketState
from coinmarket_tui.ui.input_router import InputRouter
from coinmarket_tui.ui.keys import KeyEvent
from coinmarket_tui.ui.render_engine import RenderEngine
from coinmarket_tui.ui.terminal import TerminalError
from coinmarket_tui.ui.themes import PALETTES
from coinmarket_tui.utils.keyboard_handler import KeyboardHandler


class AppStatus(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class CoinMarketApp:
    """Live ticker dashboard: owns the market state and drives every frame.

    The loop is the only writer of MarketState. Key events and refresh
    results arrive on queues filled by the keyboard listener and the refresh
    scheduler; each UI tick consumes at most one of each, applies them and
    draws a single frame.
    """

    def __init__(self, logger: Logger, source: MarketDataSource, terminal: TerminalProtocol,
                 options: AppOptions, router: Optional[InputRouter] = None,
                 renderer: Optional[RenderEngine] = None):
        self.logger = logger
        self.source = source
        self.terminal = terminal
        self.options = options
        self.router = router or InputRouter()
        self.renderer = renderer or RenderEngine()
        self.state = MarketState(
            sort_key=options.initial_sort_key,
            sort_direction=options.initial_sort_direction,
            filter_text=options.filter_text,
            theme_index=options.theme_index,
            theme_count=len(PALETTES),
        )
        self.key_events: "asyncio.Queue[KeyEvent]" = asyncio.Queue()
        self.results: "asyncio.Queue[RefreshCycle]" = asyncio.Queue()
        self.scheduler = RefreshScheduler(
            source,
            self.results,
            logger,
            interval=options.refresh_interval,
            backoff_ceiling=options.backoff_ceiling,
        )
        self.keyboard_handler = KeyboardHandler(terminal, self.key_events, logger=logger)
        self.status = AppStatus.RUNNING
        self.exit_code = 0
        self.frames_drawn = 0
        self._quit_requested = False
        self._keyboard_task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self.status is AppStatus.RUNNING

    def request_quit(self) -> None:
        """Ask the loop to stop at its next tick (used by signal handlers)."""
        self._quit_requested = True

    async def run(self) -> int:
        """Run the dashboard until Quit or a fatal terminal error.

        Returns:
            Process exit code: 0 after a clean quit, 1 after a terminal failure
        """
        try:
            self.terminal.enter()
        except TerminalError as e:
            self.logger.error(f"Cannot start dashboard: {e}")
            return 1

        self.logger.set_console_output(False)
        self.logger.info(f"Dashboard started with {self.source.name} data, "
                         f"refreshing every {self.options.refresh_interval:.1f}s")
        self.scheduler.start()
        self._keyboard_task = asyncio.create_task(
            self.keyboard_handler.start_listening(), name="Keyboard-Listener"
        )

        try:
            while self.running:
                self.step()
                if self.running:
                    await asyncio.sleep(self.options.ui_tick)
        finally:
            await self.shutdown()
        return self.exit_code

    def step(self) -> None:
        """One UI tick: at most one key, at most one result, exactly one frame."""
        if self._quit_requested:
            self._begin_shutdown("quit requested by signal")
            return
        if self.keyboard_handler.failure is not None:
            self._fatal(self.keyboard_handler.failure)
            return

        command = self._next_command()
        cycle = self._next_result()

        if command is not None:
            self.dispatch(command)
        if cycle is not None and self.running:
            self.apply_cycle(cycle)
        if self.running:
            self._render()

    def _next_command(self) -> Optional[Command]:
        try:
            event = self.key_events.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return self.router.route(event, searching=self.state.is_searching)

    def _next_result(self) -> Optional[RefreshCycle]:
        try:
            return self.results.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def dispatch(self, command: Command) -> None:
        if isinstance(command, Quit):
            self._begin_shutdown("quit requested")
        elif isinstance(command, ForceRefresh):
            self.scheduler.force_refresh()
        else:
            self.state.apply_command(command)

    def apply_cycle(self, cycle: RefreshCycle) -> None:
        if cycle.is_success:
            applied = self.state.apply_refresh(cycle.records, cycle.generation)
        elif cycle.is_failure:
            applied = self.state.apply_failure(cycle.error, cycle.generation)
        else:
            return
        if not applied:
            self.logger.debug(f"Ignored refresh generation {cycle.generation} "
                              f"(state already at {self.state.generation})")

    def _render(self) -> None:
        try:
            _, height = self.terminal.size
            frame = self.renderer.render(self.state.snapshot(), height)
            self.terminal.draw(frame)
            self.frames_drawn += 1
        except TerminalError as e:
            self._fatal(e)

    def _fatal(self, error: Exception) -> None:
        self.logger.error(f"Terminal failure: {error}")
        self.exit_code = 1
        self._begin_shutdown("terminal failure")

    def _begin_shutdown(self, reason: str) -> None:
        if self.status is AppStatus.SHUTTING_DOWN:
            return
        self.logger.info(f"Shutting down: {reason}")
        self.status = AppStatus.SHUTTING_DOWN
        # Abandon in-flight fetches right away; nothing below waits on the network
        self.scheduler.stop()
        self.keyboard_handler.stop_listening()

    async def shutdown(self) -> None:
        """Stop background work, restore the terminal and close the source."""
        if self._closed:
            return
        self._closed = True
        self._begin_shutdown("loop exited")

        if self._keyboard_task and not self._keyboard_task.done():
            self._keyboard_task.cancel()
            try:
                await self._keyboard_task
            except asyncio.CancelledError:
                pass

        try:
            self.terminal.exit()
        except TerminalError as e:
            self.logger.error(f"Failed to restore terminal: {e}")
            self.exit_code = 1
        finally:
            self.logger.set_console_output(True)

        try:
            await self.source.close()
        except Exception as e:
            self.logger.warning(f"Error closing {self.source.name} source: {e}")
        self.logger.info("Shutdown complete")
