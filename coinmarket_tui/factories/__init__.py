"""Factories for creating market data sources."""
from .data_source_factory import DataSourceFactory

__all__ = ['DataSourceFactory']
