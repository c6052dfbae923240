"""CoinMarket TUI - live cryptocurrency ticker dashboard for the terminal."""

__version__ = "1.0.0"
