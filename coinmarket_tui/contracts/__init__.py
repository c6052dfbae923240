"""Protocols describing the dashboard's external collaborators."""
from .config import ConfigProtocol
from .market_data import MarketDataSource
from .terminal import TerminalProtocol

__all__ = ['ConfigProtocol', 'MarketDataSource', 'TerminalProtocol']
