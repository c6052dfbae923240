import io
import os
import sys

import pytest
from rich.console import Console

from coinmarket_tui.ui.keys import KeyEvent
from coinmarket_tui.ui.terminal import RichTerminal, TerminalError

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="select() on pipes needs POSIX")


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "rb", buffering=0)
    writer = os.fdopen(write_fd, "wb", buffering=0)
    yield reader, writer
    reader.close()
    if not writer.closed:
        writer.close()


class TestRichTerminalInput:
    def make_terminal(self, reader):
        return RichTerminal(console=Console(file=io.StringIO()), stdin=reader)

    def test_buffered_bytes_decode_to_keys(self, pipe):
        reader, writer = pipe
        writer.write(b"j\x1b[B")
        terminal = self.make_terminal(reader)

        assert terminal.read_key(timeout=0.1) == KeyEvent("j")
        assert terminal.read_key(timeout=0.1) == KeyEvent("down")
        assert terminal.read_key(timeout=0) is None

    def test_closed_input_stream_is_fatal(self, pipe):
        reader, writer = pipe
        writer.close()
        terminal = self.make_terminal(reader)

        with pytest.raises(TerminalError, match="closed"):
            terminal.read_key(timeout=0.1)

    def test_enter_requires_a_tty(self, pipe):
        reader, _ = pipe
        with pytest.raises(TerminalError, match="interactive terminal"):
            self.make_terminal(reader).enter()
