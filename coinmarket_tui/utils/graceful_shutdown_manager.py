import asyncio
import signal
import sys
from typing import Callable, Optional

from coinmarket_tui.logger.logger import Logger


class GracefulShutdownManager:
    """Turns SIGINT/SIGTERM into a quit request for the running app.

    When no quit callback is registered the pending tasks are cancelled
    instead, so a signal during startup still ends the process.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, logger: Logger,
                 request_quit: Optional[Callable[[], None]] = None):
        self.loop = loop
        self.logger = logger
        self.request_quit = request_quit

    def setup_signal_handlers(self):
        if sys.platform != 'win32':
            for sig in (signal.SIGINT, signal.SIGTERM):
                self.loop.add_signal_handler(sig, lambda s=sig, *args: self.handle_signal(s))
        else:
            signal.signal(signal.SIGINT, lambda s, f, *args: self.loop.call_soon_threadsafe(self.handle_signal, s))

    def remove_signal_handlers(self):
        if sys.platform != 'win32':
            for sig in (signal.SIGINT, signal.SIGTERM):
                self.loop.remove_signal_handler(sig)
        else:
            signal.signal(signal.SIGINT, signal.default_int_handler)

    def handle_signal(self, sig: int):
        self.logger.info(f"Received signal {sig}, initiating shutdown...")
        if self.request_quit is not None:
            self.request_quit()
        elif self.loop.is_running() and not self.loop.is_closed():
            self.loop.create_task(self.shutdown_gracefully())

    async def shutdown_gracefully(self, timeout: float = 5.0):
        self.logger.info("Performing graceful shutdown...")
        pending_tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task() and not t.done()]
        if pending_tasks:
            self.logger.debug(f"Cancelling {len(pending_tasks)} tasks...")
            for task in pending_tasks:
                task.cancel()
            done, still_pending = await asyncio.wait(pending_tasks, timeout=timeout)
            if still_pending:
                names = [t.get_name() for t in still_pending]
                self.logger.warning(f"Some tasks didn't complete in time: {names}")
        try:
            await asyncio.wait_for(self.loop.shutdown_asyncgens(), timeout=2.0)
        except (asyncio.TimeoutError, RuntimeError) as e:
            self.logger.warning(f"Error shutting down async generators: {e}")
