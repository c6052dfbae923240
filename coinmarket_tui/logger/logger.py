import logging
import os
import sys
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

install_rich_traceback()

DEFAULT_LOG_DIR = "logs"


class DailyRotatingFileHandler(logging.FileHandler):
    """Writes to ``<log_dir>/<logger>/<date>/`` (or ``errors/<date>/``) and moves on at midnight."""

    def __init__(self, filename, log_dir, log_filename_prefix, logger_name, is_error_handler=False, *args, **kwargs):
        self.log_dir = log_dir
        self.log_filename_prefix = log_filename_prefix
        self.logger_name = logger_name
        self.is_error_handler = is_error_handler
        super().__init__(filename, *args, **kwargs)

    def _current_filename(self) -> str:
        current_date = datetime.now().strftime("%Y_%m_%d")
        subdir = "errors" if self.is_error_handler else self.logger_name
        current_log_dir = os.path.join(self.log_dir, subdir, current_date)
        os.makedirs(current_log_dir, exist_ok=True)
        return os.path.normpath(
            os.path.join(current_log_dir, f"{self.log_filename_prefix}{self.logger_name}.log")
        )

    def emit(self, record):
        current_filename = self._current_filename()
        if os.path.normpath(self.baseFilename) != current_filename:
            if self.stream:
                self.stream.close()
            self.baseFilename = current_filename
            self.stream = self._open()
        super().emit(record)


class Logger(logging.Logger):
    """Application logger: daily files, an error file, and an optional rich console.

    The console handler is switched off while the full-screen dashboard owns
    the terminal, so log lines never interleave with frames.
    """

    def __init__(self, logger_name: str = '', log_filename_prefix: str = '', log_dir: Optional[str] = None,
                 logger_debug: bool = False, console_output: bool = True) -> None:
        sanitized_name = logger_name.replace('/', '_').replace('\\', '_')

        level = logging.DEBUG if logger_debug else logging.INFO
        super().__init__(sanitized_name, level)

        self.log_filename_prefix = log_filename_prefix
        self.log_dir = log_dir or DEFAULT_LOG_DIR
        self.date_format = "%d.%m.%Y %H:%M:%S"
        self._console_handler: Optional[RichHandler] = None

        self._setup_logger(console_output)
        self.debug(f"Logger {sanitized_name} initialized with log directory: {self.log_dir}")

    def custom_exception_hook(self, exctype, value, traceback):
        if exctype == KeyboardInterrupt:
            print("KeyboardInterrupt caught. Exiting gracefully.")
        else:
            self.error("Uncaught exception", exc_info=(exctype, value, traceback))
            sys.exit(1)

    def set_console_output(self, enabled: bool) -> None:
        """Attach or detach the rich console handler."""
        if enabled and self._console_handler is None:
            self._add_console_handler()
        elif not enabled and self._console_handler is not None:
            self.removeHandler(self._console_handler)
            self._console_handler = None

    def _get_log_dir(self, current_date: str, is_error: bool = False) -> str:
        subdir = 'errors' if is_error else (self.name or 'default')
        log_dir = os.path.join(self.log_dir, subdir, current_date)
        os.makedirs(log_dir, exist_ok=True)
        return log_dir

    def _get_log_filename(self, log_dir: str) -> str:
        name = self.name if self.name else "default"
        return os.path.join(log_dir, f"{self.log_filename_prefix}{name}.log")

    def _plain_formatter(self) -> logging.Formatter:
        format_string = "[{asctime}] {filename}.{funcName} - {message}" if self.level == logging.DEBUG else "[{asctime}] - {message}"
        return logging.Formatter(format_string, datefmt=self.date_format, style="{")

    def _setup_logger(self, console_output: bool) -> None:
        if self.handlers:
            return
        current_date = datetime.now().strftime("%Y_%m_%d")
        if console_output:
            self._add_console_handler()
        self._add_file_handler(self._get_log_dir(current_date), is_error=False)
        self._add_file_handler(self._get_log_dir(current_date, is_error=True), is_error=True)

    def _add_console_handler(self):
        console = Console(color_system="auto", stderr=True)
        rich_handler = RichHandler(console=console, rich_tracebacks=False)
        rich_handler.setLevel(self.level)
        self.addHandler(rich_handler)
        self._console_handler = rich_handler

    def _add_file_handler(self, log_dir: str, is_error: bool):
        file_handler = DailyRotatingFileHandler(
            self._get_log_filename(log_dir),
            self.log_dir,
            self.log_filename_prefix,
            self.name or "default",
            is_error_handler=is_error,
            encoding='utf-8',
            delay=True,
        )
        file_handler.setLevel(logging.ERROR if is_error else self.level)
        file_handler.setFormatter(self._plain_formatter())
        self.addHandler(file_handler)
