"""
Config Protocol - Interface for configuration management.

Lets factories and the entry point depend on configuration without importing
the concrete Config.
"""

from typing import Dict, List, Optional, Protocol

from coinmarket_tui.config.options import AppOptions
from coinmarket_tui.models.sorting import SortKey


class ConfigProtocol(Protocol):
    """Protocol defining the configuration members the dashboard reads."""

    # ===== Environment Variables (Private Keys) =====
    @property
    def BINANCE_API_KEY(self) -> Optional[str]: ...

    @property
    def COINGECKO_API_KEY(self) -> Optional[str]: ...

    # ===== General =====
    @property
    def PROVIDER(self) -> str: ...

    @property
    def REFRESH_INTERVAL(self) -> float: ...

    @property
    def BACKOFF_CEILING(self) -> float: ...

    @property
    def UI_FPS(self) -> float: ...

    @property
    def FETCH_TIMEOUT(self) -> float: ...

    @property
    def INITIAL_SORT(self) -> SortKey: ...

    @property
    def SORT_DESCENDING(self) -> bool: ...

    @property
    def THEME(self) -> int: ...

    @property
    def FILTER(self) -> str: ...

    # ===== Providers =====
    @property
    def BINANCE_BASE_URL(self) -> str: ...

    @property
    def BINANCE_QUOTE_ASSET(self) -> str: ...

    @property
    def BINANCE_SYMBOLS(self) -> List[str]: ...

    @property
    def BINANCE_LIMIT(self) -> int: ...

    @property
    def COINGECKO_BASE_URL(self) -> str: ...

    @property
    def COINGECKO_VS_CURRENCY(self) -> str: ...

    @property
    def COINGECKO_PER_PAGE(self) -> int: ...

    @property
    def MOCK_SEED(self) -> int: ...

    @property
    def MOCK_SYMBOLS(self) -> List[str]: ...

    @property
    def MOCK_FAILURE_RATE(self) -> float: ...

    # ===== Input / Debug =====
    @property
    def KEY_BINDINGS(self) -> Dict[str, List[str]]: ...

    @property
    def LOGGER_DEBUG(self) -> bool: ...

    @property
    def LOG_DIR(self) -> str: ...

    def to_options(self) -> AppOptions: ...
