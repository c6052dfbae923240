"""
CoinMarket TUI - Entry Point
Live cryptocurrency tickers in the terminal.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from coinmarket_tui.app import CoinMarketApp
from coinmarket_tui.config.loader import Config, VALID_PROVIDERS
from coinmarket_tui.factories import DataSourceFactory
from coinmarket_tui.logger.logger import Logger
from coinmarket_tui.models.sorting import SortKey
from coinmarket_tui.ui.input_router import InputRouter
from coinmarket_tui.ui.terminal import RichTerminal
from coinmarket_tui.utils.graceful_shutdown_manager import GracefulShutdownManager


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CoinMarket TUI - live cryptocurrency tickers in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python start.py                         # Provider and settings from config.ini
  python start.py -p coingecko            # Top coins from CoinGecko
  python start.py -p mock -i 1            # Offline random walk, 1s refresh
  python start.py --sort change -f ETH    # Sorted by 24h change, only ETH*
        """
    )
    parser.add_argument(
        "-p", "--provider",
        choices=sorted(VALID_PROVIDERS),
        default=None,
        help="Market data provider. Default: from config"
    )
    parser.add_argument(
        "-i", "--interval",
        type=float,
        default=None,
        help="Seconds between refreshes. Default: from config"
    )
    parser.add_argument(
        "-s", "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Initial sort column. Default: from config"
    )
    parser.add_argument(
        "-f", "--filter",
        default=None,
        help="Initial symbol prefix filter (e.g. BTC)"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config.ini. Default: config/config.ini"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Build the configuration with command line flags layered on top."""
    config = Config(config_path=args.config)
    config.override('general', 'provider', args.provider)
    config.override('general', 'refresh_interval', args.interval)
    config.override('general', 'initial_sort', args.sort)
    config.override('general', 'filter', args.filter)
    if args.debug:
        config.override('debug', 'logger_debug', True)
    return config


async def main_async(logger: Logger, config: Config, shutdown_manager: GracefulShutdownManager) -> int:
    """Async entry point for the application"""
    options = config.to_options()
    router = InputRouter(config.KEY_BINDINGS)
    source = DataSourceFactory(logger, config).create()

    app = CoinMarketApp(logger, source, RichTerminal(), options, router=router)
    shutdown_manager.request_quit = app.request_quit
    return await app.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with clean shutdown delegation."""
    args = parse_args(argv)
    error_console = Console(stderr=True)

    try:
        config = load_config(args)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        error_console.print(f"[bold red]Configuration error:[/] {e}")
        return 1

    logger = Logger(logger_name="CoinMarket", log_dir=config.LOG_DIR, logger_debug=config.LOGGER_DEBUG)
    sys.excepthook = logger.custom_exception_hook

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    shutdown_manager = GracefulShutdownManager(loop, logger)
    shutdown_manager.setup_signal_handlers()

    try:
        return loop.run_until_complete(main_async(logger, config, shutdown_manager))
    except ValueError as e:
        logger.critical(f"Startup failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received - initiating graceful shutdown...")
        loop.run_until_complete(shutdown_manager.shutdown_gracefully())
        return 0
    finally:
        shutdown_manager.remove_signal_handlers()
        loop.close()


if __name__ == "__main__":
    sys.exit(main())
