"""
Configuration loader for CoinMarket TUI.
Loads optional private keys from keys.env and public configuration from config.ini.
"""

import configparser
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import dotenv_values

from coinmarket_tui.config.options import AppOptions
from coinmarket_tui.models.sorting import SortDirection, SortKey

# Root directory (where keys.env lives) and config directory (where config.ini lives)
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()
CONFIG_DIR = ROOT_DIR / "config"
KEYS_ENV_PATH = ROOT_DIR / "keys.env"
CONFIG_INI_PATH = CONFIG_DIR / "config.ini"

VALID_PROVIDERS = {"binance", "coingecko", "mock"}


class Config:
    """Configuration class that loads settings from environment and INI files.

    Implements ConfigProtocol. ``config_path`` given explicitly must exist;
    when the bundled config.ini is missing the built-in defaults apply.
    keys.env is optional since every supported provider works without a key.
    """

    def __init__(self, config_path: Optional[Path] = None, keys_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else CONFIG_INI_PATH
        self.keys_path = Path(keys_path) if keys_path else KEYS_ENV_PATH
        self._require_config = config_path is not None
        self._env_vars: Dict[str, Any] = {}
        self._config_data: Dict[str, Dict[str, Any]] = {}
        self._raw_data: Dict[str, Dict[str, str]] = {}
        self._load_environment()
        self._load_ini_config()
        self._validate()

    def _load_environment(self):
        """Load environment variables from keys.env using python-dotenv."""
        if not self.keys_path.exists():
            return

        try:
            env_vars = dotenv_values(self.keys_path)
            for key, value in env_vars.items():
                if value is not None and value != "":
                    self._env_vars[key] = value
        except Exception as e:
            raise RuntimeError(f"Error loading environment file {self.keys_path}: {e}") from e

    def _load_ini_config(self):
        """Load configuration from config.ini."""
        if not self.config_path.exists():
            if self._require_config:
                raise FileNotFoundError(
                    f"Configuration file not found: {self.config_path}. "
                    "Pass an existing config.ini or omit --config to use the defaults."
                )
            logging.warning(f"{self.config_path} not found, using built-in defaults")
            return

        try:
            parser = configparser.ConfigParser()
            parser.read(self.config_path, encoding='utf-8')

            for section_name in parser.sections():
                raw = dict(parser.items(section_name))
                self._raw_data[section_name] = raw
                self._config_data[section_name] = {k: self._convert_value(v) for k, v in raw.items()}
        except configparser.Error as e:
            raise RuntimeError(f"Error loading configuration file {self.config_path}: {e}") from e

    def _validate(self):
        """Validate the enumerated settings so bad values fail at startup."""
        provider = self.PROVIDER
        if provider not in VALID_PROVIDERS:
            valid_options = ", ".join(f'"{p}"' for p in sorted(VALID_PROVIDERS))
            error_msg = (
                f"Invalid market data provider '{provider}'.\n"
                f"Supported values are: {valid_options}.\n"
                f"Please update the [general] -> provider setting."
            )
            logging.critical(error_msg)
            raise ValueError(error_msg)

        try:
            SortKey.parse(self.get_config('general', 'initial_sort', 'name'))
        except ValueError as e:
            logging.critical(f"Invalid [general] -> initial_sort: {e}")
            raise

    @staticmethod
    def _convert_value(value: str) -> Any:
        """Convert string values to appropriate Python types."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False
        if value.isdigit():
            return int(value)
        try:
            if '.' in value and ',' not in value:
                return float(value)
        except ValueError:
            pass
        if ',' in value:
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    @staticmethod
    def _as_list(value: Any) -> List[str]:
        if value in (None, "", False):
            return []
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [str(value)]

    def get_env(self, key: str, default: Any = None) -> Any:
        """Get environment variable."""
        return self._env_vars.get(key, default)

    def get_config(self, section: str, key: str, default: Any = None) -> Any:
        """Get configuration value from INI file."""
        return self._config_data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section."""
        return self._config_data.get(section, {})

    def override(self, section: str, key: str, value: Any) -> None:
        """Replace a setting at runtime (command line flags) and re-validate."""
        if value is None:
            return
        self._config_data.setdefault(section, {})[key] = value
        self._validate()

    # Environment variables (private keys)
    @property
    def BINANCE_API_KEY(self):
        return self.get_env('BINANCE_API_KEY')

    @property
    def COINGECKO_API_KEY(self):
        return self.get_env('COINGECKO_API_KEY')

    # General Configuration
    @property
    def PROVIDER(self) -> str:
        return str(self.get_config('general', 'provider', 'binance')).strip().lower()

    @property
    def REFRESH_INTERVAL(self) -> float:
        return float(self.get_config('general', 'refresh_interval', 5.0))

    @property
    def BACKOFF_CEILING(self) -> float:
        return float(self.get_config('general', 'backoff_ceiling', 60.0))

    @property
    def UI_FPS(self) -> float:
        return float(self.get_config('general', 'ui_fps', 30))

    @property
    def FETCH_TIMEOUT(self) -> float:
        return float(self.get_config('general', 'fetch_timeout', 10.0))

    @property
    def INITIAL_SORT(self) -> SortKey:
        return SortKey.parse(self.get_config('general', 'initial_sort', 'name'))

    @property
    def SORT_DESCENDING(self) -> bool:
        return bool(self.get_config('general', 'sort_descending', False))

    @property
    def THEME(self) -> int:
        return int(self.get_config('general', 'theme', 0))

    @property
    def FILTER(self) -> str:
        return str(self.get_config('general', 'filter', '') or '').upper()

    # Binance Configuration
    @property
    def BINANCE_BASE_URL(self) -> str:
        return self.get_config('binance', 'base_url', 'https://api.binance.com')

    @property
    def BINANCE_QUOTE_ASSET(self) -> str:
        return str(self.get_config('binance', 'quote_asset', 'USDT')).upper()

    @property
    def BINANCE_SYMBOLS(self) -> List[str]:
        return [s.upper() for s in self._as_list(self.get_config('binance', 'symbols', []))]

    @property
    def BINANCE_LIMIT(self) -> int:
        return int(self.get_config('binance', 'limit', 0))

    # CoinGecko Configuration
    @property
    def COINGECKO_BASE_URL(self) -> str:
        return self.get_config('coingecko', 'base_url', 'https://api.coingecko.com/api/v3')

    @property
    def COINGECKO_VS_CURRENCY(self) -> str:
        return str(self.get_config('coingecko', 'vs_currency', 'usd')).lower()

    @property
    def COINGECKO_PER_PAGE(self) -> int:
        return int(self.get_config('coingecko', 'per_page', 100))

    # Mock Configuration
    @property
    def MOCK_SEED(self) -> int:
        return int(self.get_config('mock', 'seed', 42))

    @property
    def MOCK_SYMBOLS(self) -> List[str]:
        return [s.upper() for s in self._as_list(self.get_config('mock', 'symbols', []))]

    @property
    def MOCK_FAILURE_RATE(self) -> float:
        return float(self.get_config('mock', 'failure_rate', 0.0))

    @property
    def KEY_BINDINGS(self) -> Dict[str, List[str]]:
        """Action -> keys overrides from [keys], read untyped so "1" stays a key."""
        bindings = {}
        for action, raw in self._raw_data.get('keys', {}).items():
            bound = [k.strip() for k in raw.split(',') if k.strip()]
            if bound:
                bindings[action] = bound
        return bindings

    # Debug Configuration
    @property
    def LOGGER_DEBUG(self) -> bool:
        return bool(self.get_config('debug', 'logger_debug', False))

    @property
    def LOG_DIR(self) -> str:
        return str(self.get_config('debug', 'log_dir', 'logs'))

    def to_options(self) -> AppOptions:
        """Build the parsed options the app loop runs with."""
        ui_fps = self.UI_FPS
        if ui_fps <= 0:
            raise ValueError(f"[general] -> ui_fps must be positive, got {ui_fps}")
        return AppOptions(
            refresh_interval=self.REFRESH_INTERVAL,
            backoff_ceiling=self.BACKOFF_CEILING,
            initial_sort_key=self.INITIAL_SORT,
            initial_sort_direction=SortDirection.DESCENDING if self.SORT_DESCENDING else SortDirection.ASCENDING,
            ui_tick=1.0 / ui_fps,
            fetch_timeout=self.FETCH_TIMEOUT,
            theme_index=self.THEME,
            filter_text=self.FILTER,
        )
