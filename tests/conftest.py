from unittest.mock import MagicMock

import pytest

from coinmarket_tui.logger.logger import Logger
from tests.helpers import make_record


@pytest.fixture
def logger():
    return MagicMock(spec=Logger)


@pytest.fixture
def records():
    return [
        make_record("BTCUSDT", price=50000.0, change_pct=1.2, volume=2e9),
        make_record("ETHUSDT", price=3000.0, change_pct=-0.5, volume=1e9),
        make_record("SOLUSDT", price=140.0, change_pct=3.4, volume=4e8),
    ]
