import asyncio
import unittest
from unittest.mock import MagicMock

from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.ui.keys import KeyEvent
from coinmarket_tui.ui.terminal import TerminalError
from coinmarket_tui.utils.keyboard_handler import KeyboardHandler
from tests.helpers import FakeTerminal


class TestKeyboardHandler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = MagicMock(spec=Logger)
        self.events = asyncio.Queue()

    async def test_buffered_keys_are_forwarded_in_order(self):
        terminal = FakeTerminal(keys=["j", "j", "k"])
        handler = KeyboardHandler(terminal, self.events, logger=self.logger, poll_interval=0.01)
        task = asyncio.create_task(handler.start_listening())

        received = [await asyncio.wait_for(self.events.get(), timeout=1) for _ in range(3)]
        handler.stop_listening()
        await asyncio.wait_for(task, timeout=1)

        self.assertEqual(received, [KeyEvent("j"), KeyEvent("j"), KeyEvent("k")])
        self.assertIsNone(handler.failure)

    async def test_terminal_error_is_recorded(self):
        terminal = MagicMock()
        terminal.read_key.side_effect = TerminalError("input closed")
        handler = KeyboardHandler(terminal, self.events, logger=self.logger, poll_interval=0.01)

        await asyncio.wait_for(handler.start_listening(), timeout=1)

        self.assertIsInstance(handler.failure, TerminalError)
        self.assertFalse(handler.running)
        self.logger.error.assert_called()

    async def test_cancel_stops_listener(self):
        handler = KeyboardHandler(FakeTerminal(), self.events, poll_interval=0.01)
        task = asyncio.create_task(handler.start_listening())
        await asyncio.sleep(0.02)
        task.cancel()
        await asyncio.wait_for(task, timeout=1)
        self.assertTrue(task.done())

    async def test_held_key_backlog_is_capped(self):
        terminal = FakeTerminal(keys=["j"] * 30 + ["q"])
        handler = KeyboardHandler(terminal, self.events, logger=self.logger)
        handler.running = True

        handler._process_keyboard_input()

        queued = [self.events.get_nowait() for _ in range(self.events.qsize())]
        self.assertEqual(queued, [KeyEvent("j"), KeyEvent("j"), KeyEvent("q")])

    async def test_repeats_resume_once_queue_drains(self):
        terminal = FakeTerminal(keys=["j"] * 5)
        handler = KeyboardHandler(terminal, self.events, logger=self.logger)
        handler.running = True

        handler._process_keyboard_input()
        self.events.get_nowait()
        self.events.get_nowait()
        terminal.script = ["j"]
        handler._process_keyboard_input()

        self.assertEqual(self.events.qsize(), 1)
